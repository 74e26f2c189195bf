"""CLI package exports for top-level command entry points."""

from __future__ import annotations

from .main import VMBootModalCLI, main

__all__ = ['VMBootModalCLI', 'main']
