# Services package init
"""
RecipeHub Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Stateless service classes with a module-level singleton each. Every
       method takes the request's AsyncSession as its first argument and
       raises RecipeHubError subclasses; routes never see SQLAlchemy errors.

Service Inventory:
    - RecipeService: recipe listing, detail, create/update/delete, tickets
    - ReviewService: reviews embedded in a recipe and its derived rating
    - RoleRequestService: Reader → Writer upgrade workflow
    - UserService: account administration and saved recipes
    - AuthService: password login issuing bearer tokens
"""
