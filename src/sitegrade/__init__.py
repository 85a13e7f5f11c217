"""sitegrade: passive website security audit with compliance mapping."""

__version__ = "0.1.0"
