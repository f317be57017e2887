"""
RecipeHub Backend — Pydantic Request/Response Schemas
=======================================================

Schemas are separate from the ORM models: they define the API contract
(camelCase field names on the wire, snake_case in Python) and carry the
field-level validation rules for request bodies.
"""
