"""
Ulyngo Backend — Middleware Package
=====================================

Execution order for a request:
    [Request ID] → [Rate Limit] → [Access Log] → [GZip] → [CORS] → route

The request id is assigned first so that 429 bodies and access log lines
both carry it.
"""
