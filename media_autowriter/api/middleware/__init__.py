"""API middleware: rate limiting and error mapping."""
