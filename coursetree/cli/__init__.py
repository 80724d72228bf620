"""Command-line interface for coursetree."""
