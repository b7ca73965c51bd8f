"""Attribute conversion, context, options and tracing/metrics middlewares for SQL calls."""

__version__ = "0.1.0"

__all__ = ["attributes", "context", "middleware", "options", "operations"]