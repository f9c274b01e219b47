"""
Backend package for the portfolio site.

This package provides a FastAPI application that serves the owner's profile,
project catalog and CV, and collects contact messages, with storage and
database abstractions that can run fully in memory for tests.
"""
