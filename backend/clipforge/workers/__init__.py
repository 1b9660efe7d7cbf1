"""Background task runners for the pipeline."""
