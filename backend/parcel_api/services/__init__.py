# Services package init
"""
Parcel Delivery Backend — Services Layer
==========================================

What:  Business logic between routes (HTTP) and the DocumentStore (persistence).
How:   Each resource service takes an AsyncSession plus validated input and
       returns response models or documents. External providers sit behind
       small abstract interfaces so tests can swap them on app.state.

Service Inventory:
    - UserService:      search, sign-in upsert, admin role changes
    - RiderService:     applications and the accept → promote-to-rider cascade
    - ParcelService:    parcel CRUD
    - TrackingService:  append-only tracking log and history
    - PaymentService:   payment recording (marks the parcel paid) and history
    - TokenVerifier (abstract) / FirebaseTokenVerifier: bearer token → claims
    - PaymentGateway (abstract) / StripePaymentGateway: payment intents
"""
