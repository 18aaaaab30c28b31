"""Infrastructure adapters (Redis Streams, logging, in-memory event bus)."""
