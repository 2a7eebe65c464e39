# Routes package init
"""
RecipeHub Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - recipes.py:        /recipes, /recipes/manage, /recipes/{id}
    - reviews.py:        /recipes/{id}/reviews[/{reviewId}]
    - role_requests.py:  /role-requests, /mine, /count/unread, /{id}, /{id}/read
    - users.py:          /users, /users/saved-recipes, /users/save-recipe
    - auth.py:           POST /auth
    - health.py:         GET  /health

Design Principle:
    Routes are thin. They declare the Action (access rule), parse the body,
    call one service method and return its result. Business rules live in
    services.
"""
