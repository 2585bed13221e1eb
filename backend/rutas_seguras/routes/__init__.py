# Routes package init
"""
Rutas Seguras Backend — API Routes Package
==========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:            /api/auth/register, /login, /me, /change-password, /logout
    - transit_routes.py:  /api/routes (search, popular, suggestions, assigned, CRUD)
    - units.py:           /api/units (CRUD)
    - users.py:           /api/users (admin CRUD), /api/users/drivers
    - contacts.py:        /api/contacts (public create, admin list)
    - stats.py:           /api/stats
    - health.py:          /health

Design Principle:
    Routes should be THIN. They handle HTTP concerns only:
    - Extract data from the request (query params, body, caller identity)
    - Call the appropriate service
    - Wrap the result in the success envelope with the right status code

    Business logic belongs in services, not routes.
"""
