"""promptkit - installer for a personal AI coding assistant toolkit."""

__version__ = "1.1.0"
