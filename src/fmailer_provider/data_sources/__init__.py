"""Read-only data source types."""
