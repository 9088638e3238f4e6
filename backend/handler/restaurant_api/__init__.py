"""Serverless handlers for the restaurant table reservation API."""

__version__ = "1.0.0"
