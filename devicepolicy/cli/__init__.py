"""Command-line interface for device settings policies."""
