"""AI-assisted article generation for multi-tenant media sites."""

__version__ = "1.0.0"
