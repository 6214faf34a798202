"""Domain exceptions raised by services and mapped to HTTP responses by the API."""

from __future__ import annotations


class EntityNotFoundError(Exception):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when a write would break a uniqueness rule."""

    def __init__(self, entity: str, field: str, value: str):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' already exists")


class AuthenticationError(Exception):
    """Raised on bad credentials, inactive users or invalid tokens."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when a user lacks a module permission."""

    def __init__(self, module: str, action: str):
        self.module = module
        self.action = action
        super().__init__(f"Missing '{action}' permission on module '{module}'")
