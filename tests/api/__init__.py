"""API tests package.

End-to-end tests for the HTTP surface using TestClient. Redis-backed
components are either replaced through dependency overrides or wired to
fakeredis.
"""
