# Middleware package init
"""
Postboard Backend — Middleware Package
========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Access Logging] → [CORS] → Route Handler

    Request ID runs first so the access log line carries the ID.
"""
