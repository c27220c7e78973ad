"""
Ulyngo Backend — API Routes Package
=====================================

Route Inventory:
    - auth.py:      POST /api/auth/register, /api/auth/login
    - travel.py:    POST /api/plan-trip, /api/places/search;
                    POST/GET /api/routes
    - markers.py:   /api/markers[/{id}]
    - taxonomy.py:  /api/marker/categories[/{id}], /api/marker/tags[/{id}]
    - health.py:    GET /health

Routes stay thin: read the request, call a service, shape the response.
"""
