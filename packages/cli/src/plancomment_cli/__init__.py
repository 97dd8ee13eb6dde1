"""Command-line interface for plancomment."""
