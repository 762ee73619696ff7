"""Command-line interface for geekfit."""
