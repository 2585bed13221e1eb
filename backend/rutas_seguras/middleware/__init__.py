# Middleware package init
"""
Rutas Seguras Backend — Middleware Package
==========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can be correlated
    2. Logging: records status and duration once the response is known
    3. GZip / CORS: FastAPI's stock middleware

There is no throttling layer; authorization happens per route through
FastAPI dependencies, not here.
"""
