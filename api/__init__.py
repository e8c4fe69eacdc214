"""HTTP API exposing the recruiting dashboard payloads."""
