"""Test suite for livefeed.

Test structure:
- unit/: Components in isolation with in-process doubles
- integration/: Redis Streams behaviour against fakeredis
- api/: HTTP endpoints through FastAPI TestClient
"""
