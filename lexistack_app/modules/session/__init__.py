"""Practice session tracking: durable per-word outcomes within a bounded session."""
