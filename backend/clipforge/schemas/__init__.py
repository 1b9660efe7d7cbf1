"""Pydantic schemas for the pipeline and the HTTP API."""
