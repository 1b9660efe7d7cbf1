"""HTTP API: FastAPI application, session handling and routes."""
