# Routes package init
"""
CarVault Backend — API Routes Package
======================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - cars.py:    POST/GET /api/cars, GET/PUT/DELETE /api/cars/{id}
    - health.py:  GET /health
    - forms.py:   multipart helpers shared by the car routes

Design Principle:
    Routes are THIN — they extract data from the request, call a service,
    and return its result. Business rules live in services.
"""
