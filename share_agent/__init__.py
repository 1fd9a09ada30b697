"""Share Agent - SMB share access and hot folder processing."""

__version__ = "0.1.0"
