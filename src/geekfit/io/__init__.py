"""Serialization and persistence for progress data."""
