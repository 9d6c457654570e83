"""
HTTP-level tests.

Requests go through the FastAPI app in-process (httpx ASGITransport) with
get_db overridden to the per-test in-memory store, so no server or
PostgreSQL instance is needed.

Run only these:
    pytest -m integration
"""
