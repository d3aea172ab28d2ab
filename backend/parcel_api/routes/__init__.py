# Routes package init
"""
Parcel Delivery Backend — API Routes Package
==============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - health.py:    GET    /                       (plain-text banner)
                    GET    /health                 (service health check)
    - users.py:     GET    /users/search           PATCH /users/{id}/role
                    POST   /users
    - riders.py:    GET    /riders/pending         GET   /riders/active
                    POST   /riders                 PATCH /riders/{id}
    - parcels.py:   GET    /parcels (auth)         GET   /parcels/{id}
                    POST   /parcels                DELETE /parcels/{id}
    - tracking.py:  POST   /tracking               GET   /tracking/{tracking_id}
    - payments.py:  GET    /payments (auth+owner)  POST  /payments
                    POST   /create-payment-intent

Design Principle:
    Routes are THIN: extract values from the request, call a service, return
    its result. Business rules and status decisions live in services/, and
    failures travel as ParcelServiceError subclasses to the handlers in main.py.
"""
