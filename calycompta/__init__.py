"""CalyCompta module & role permission registry."""

__version__ = "1.0.0"
