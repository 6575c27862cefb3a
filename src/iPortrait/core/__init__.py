"""Image model, filter pipeline and ingestion/export helpers."""
