"""UTransfer: PIN-protected temporary file relay."""

__version__ = "1.0.0"
