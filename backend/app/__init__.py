"""Application package for the Campus Pilot backend.

The FastAPI application lives in `app.main`; `python -m app` serves it
with uvicorn. Individual modules contain the concrete implementations
and documentation.
"""
