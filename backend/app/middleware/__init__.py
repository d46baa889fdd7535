# Middleware package init
"""
CarVault Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: generate (or accept) the correlation ID first
    2. Logging: log method, path, status and duration with that ID

Authentication is NOT middleware: it is a route dependency
(app.security.get_current_user) so /health and /docs stay public.
"""
