"""
Run Coach Backend

FastAPI service hosting one coaching engine per live run session.
Run with: python -m backend.server (or uvicorn backend.server:app)
"""
