# Middleware package init
"""
RecipeHub Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    - Rate limit rejects over-quota clients before any other work
    - Request ID sets the correlation id the handlers and loggers read
    - Logging records method, path, status and duration under that id
"""
