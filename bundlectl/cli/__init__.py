"""Command-line interface for bundlectl."""
