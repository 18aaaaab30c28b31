"""livefeed - real-time state-change notifications over SSE.

Domain mutations are appended to a Redis Stream and fanned out to every
connected HTTP client through a dedicated consumer group per connection.
The ``livefeed.client`` package is the receiving side: an SSE parser plus a
reconnecting client.
"""

__version__ = "0.1.0"
