"""
Exam Builder Backend — Middleware Package
===========================================

Cross-cutting request handling applied to every route:

    Request → [RequestLogging] → [CORS] → Route Handler

RequestLoggingMiddleware runs outermost so its duration covers CORS and the
handler, and its request id is set before any handler logs.
"""

from app.middleware.request_logging import RequestLoggingMiddleware, request_id_var

__all__ = ["RequestLoggingMiddleware", "request_id_var"]
