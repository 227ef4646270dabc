"""
Catalog Backend: Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id, stored in a ContextVar, echoed in X-Request-ID
    2. Logging: one access line per request with status and duration
"""
