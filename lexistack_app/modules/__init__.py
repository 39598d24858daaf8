"""Feature modules of the LexiStack application."""
