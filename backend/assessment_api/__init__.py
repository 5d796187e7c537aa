"""Application package for the assessment platform backend.

This package exposes the service, repository and model modules used by
the FastAPI application. The pure scoring, aggregation and redaction
kernels live in `utils` so they can be exercised without a database.
"""
