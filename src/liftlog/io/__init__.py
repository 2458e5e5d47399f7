"""Document storage and JSON serialization."""
