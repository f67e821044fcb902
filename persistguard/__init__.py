"""Persistence snapshot tracking and diffing."""
