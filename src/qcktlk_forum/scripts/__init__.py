"""Command-line helpers for operating a forum deployment."""
