# Middleware package init
"""
Parcel Delivery Backend — Middleware Package
==============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID first: every response, a 429 included, carries the id
    2. Rate Limit: reject abusive clients before any route work
    3. Logging: method, path, status and duration, tagged with the request id

    Authentication is NOT a middleware here: only two endpoints need it, so it
    is a route dependency (parcel_api.auth.get_current_user).
"""
