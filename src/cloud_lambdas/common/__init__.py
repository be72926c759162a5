"""Common Lambda utilities and base classes.

Provides foundational components for building Lambda handlers including
the typed handler base class, the API Gateway resolver, logging and metrics.
"""
