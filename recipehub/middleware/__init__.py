# Middleware package init
"""
RecipeHub Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: abusive clients are rejected before any work
    2. Request ID: correlation id for logs and error bodies
    3. Logging: one access line per request, tagged with the request id

    Responses travel back through the same chain in reverse, so the
    X-Request-ID header and the logged status/duration see the final response.
"""
