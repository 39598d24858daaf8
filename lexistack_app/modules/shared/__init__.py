"""Helpers shared across LexiStack modules."""
