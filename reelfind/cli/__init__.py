"""Command-line interface for reelfind."""
