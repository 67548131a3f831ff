"""Player rating calculation engine for league rankings."""

__version__ = "0.1.0"
