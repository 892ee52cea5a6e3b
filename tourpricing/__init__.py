"""Hotel rate import and tour quote pricing."""

__version__ = "1.0.0"
