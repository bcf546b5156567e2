"""External services used by the API."""
