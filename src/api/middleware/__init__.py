"""Middleware and exception handlers applied to every request.

Registration order in ``create_app`` (outermost first):
1. ``SecurityHeadersMiddleware``
2. ``RequestContextMiddleware`` (correlation ID)
3. ``RequestLoggingMiddleware``
Exception handlers sit inside all three.
"""
