"""Microblog: flat-file markdown posts served over FastAPI."""

__version__ = "0.1.0"
