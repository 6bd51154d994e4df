"""Two-step email/password form backed by MongoDB."""

__version__ = "0.1.0"
