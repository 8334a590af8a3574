"""Command-line interface for ingest_hub."""
