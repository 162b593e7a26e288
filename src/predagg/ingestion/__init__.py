"""Provider ingestion: HTTP fetch and JSON normalization."""
