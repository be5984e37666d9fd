"""Stone River Portal policy rules toolkit."""

__version__ = "0.1.0"
