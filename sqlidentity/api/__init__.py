"""FastAPI wiring for the identity stores."""
