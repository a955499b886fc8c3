"""Data models for pdf-ingest."""
