"""Command-line interface for check-image."""
