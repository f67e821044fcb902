"""Snapshot models, storage and comparison."""
