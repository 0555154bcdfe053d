"""
Guest poster generation service package.

Exposes reusable primitives for loading a template, parsing a guest list,
rendering personalized posters in bounded batches, listing the results, and
serving the FastAPI application.
"""

