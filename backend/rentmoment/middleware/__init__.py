# Middleware package init
"""
Rent The Moment Backend — Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Security Headers] → [GZip] → [CORS] → Route

    1. Request ID first so every later log line can be correlated
    2. Logging measures the full duration, including the inner layers
    3. Security headers are stamped on every response, errors included
    4. CORS (FastAPI's CORSMiddleware) answers preflight requests

Responses travel back through the same chain in reverse.
"""
