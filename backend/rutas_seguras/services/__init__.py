# Services package init
"""
Rutas Seguras Backend — Services Layer
======================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Stateless singletons; every method takes the request's AsyncSession as
       its first argument.

Service Inventory:
    - AuthService:    register, login, profile, password change, logout
    - UserService:    admin user CRUD, driver lookup, shared user insert
    - RouteService:   search, popular, suggestions, assignments, route CRUD
    - UnitService:    fleet unit CRUD
    - ContactService: contact intake and admin inbox
    - StatsService:   dashboard counters
    - pagination:     page clamping and the shared pagination envelope

Why services are separate from routes:
    1. Testability: services can be unit-tested with a mocked session
    2. Single responsibility: routes handle HTTP; services handle rules
"""
