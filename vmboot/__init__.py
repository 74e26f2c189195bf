"""Bootstrap procedures for jumpbox and openSUSE/Uyuni virtual machines."""

__version__ = '0.1.0'
