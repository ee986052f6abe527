# Routes package init
"""
Postboard Backend — API Routes Package
=========================================

Route Inventory:
    - posts.py:   POST/GET /api/posts, GET/PUT/DELETE /api/posts/{id}
    - health.py:  GET /health

Routes are thin: they pull form fields and path params off the request,
call PostService, and return the response model. Status codes for failures
come from the exception handlers in main.py.
"""
