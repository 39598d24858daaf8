"""Core infrastructure: bootstrap, errors, logging, signals."""
