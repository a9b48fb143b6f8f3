"""HTTP API derived from the compiled schema."""
