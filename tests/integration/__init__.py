"""Integration tests for ephemeral-db.

These tests require a reachable PostgreSQL server and a role with CREATEDB:
- EPHEMERAL_DB_HOST / EPHEMERAL_DB_PORT
- EPHEMERAL_DB_USER / EPHEMERAL_DB_PASSWORD

Run integration tests:
    pytest tests/integration -v

Skip integration tests:
    pytest -m "not integration"
"""
