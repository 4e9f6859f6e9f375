"""
Status Tracker Backend: API Routes Package
===========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:     /api/auth/*        (register, login, me, user admin, logout)
    - status.py:   /api/status/*      (latest, create, update, delete, history, stats)
    - privacy.py:  /api/privacy/policy
    - health.py:   /health

    dependencies.py holds the bearer-token and admin-role dependencies.

Design Principle:
    Routes handle HTTP concerns only (params, body, status code). Business
    logic lives in services so it can be tested without HTTP.
"""
