# Middleware package init
"""
Storefront Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so the access log line and any error body share
      the same correlation id.
    - Logging records status and duration on the way back out.
"""
