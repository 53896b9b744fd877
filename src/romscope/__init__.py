"""romscope: search a file catalog from a Telegram chat room."""

__version__ = "0.1.0"
