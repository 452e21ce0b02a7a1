"""HTTP transport for the engine (FastAPI)."""
