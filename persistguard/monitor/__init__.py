"""Persistence directory monitoring module."""
