# Services package init
"""
RecipeHub Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the database.
How:   Services take an AsyncSession and the acting user's id as explicit
       arguments, raise typed exceptions, and return response schemas.

Service Inventory:
    - RecipeService:   recipe CRUD, fork engine, image attach, like toggle, delete cascade
    - CommentService:  comments addressed by (recipe, comment), dual-owner delete
    - FolderService:   folder CRUD, duplicate-free membership, public feed
    - FileService:     image upload validation and storage
    - authorization:   ownership guard functions
    - likes:           pure like-list toggles shared by recipes and comments
    - lookups:         load-or-404 helpers and batched author joins
"""
