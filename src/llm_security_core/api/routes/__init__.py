"""Route handlers for the HTTP API."""
