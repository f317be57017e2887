# Routes package init
"""
RecipeHub Backend — API Routes Package
========================================

What:  HTTP route handlers. They extract path/body/auth, call a service and
       return its result; business rules live in the services.

Route Inventory:
    - recipes.py:   /api/recipes        (CRUD, fork, image, like/unlike)
    - comments.py:  /api/comments       (per-recipe comments, like/unlike)
    - folders.py:   /api/folders        (CRUD, membership, public feed)
    - uploads.py:   GET /uploads/{path} (stored recipe images)
    - health.py:    GET /health
"""
