# Middleware package init
"""
Petstagram Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: generate or accept the correlation ID
    2. Logging: log method, path, status and duration with that ID
    3. CORS: FastAPI's CORSMiddleware

    Responses pass back through in reverse order, so the request ID header
    is set on every response, including errors.
"""
