"""
Status Tracker Backend: Services Layer
=======================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless singletons; the request's AsyncSession is passed to every
       method, and results come back as Pydantic response models.

Service Inventory:
    - AuthService:    accounts, credentials, tokens, user administration
    - StatusService:  append-only status history and its aggregates
"""
