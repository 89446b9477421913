"""
Dependency injection for resources.

This module provides FastAPI dependencies that build each resource with its
repository and validator, plus a context manager for using resources
outside of a request (console commands).
"""

from typing import Optional
from sqlalchemy.orm import Session
from fastapi import Depends

from database.db import get_db
from core.validation import Validator
from repositories.user_repository import UserRepository
from repositories.user_group_repository import UserGroupRepository
from repositories.role_repository import RoleRepository
from repositories.api_key_repository import ApiKeyRepository
from services.user_resource import UserResource
from services.user_group_resource import UserGroupResource
from services.role_resource import RoleResource
from services.api_key_resource import ApiKeyResource


# ==================== Resource Dependencies ====================

def get_user_resource(db: Session = Depends(get_db)) -> UserResource:
    """
    Get UserResource instance.

    Example:
        ```python
        @router.get("/user/")
        def listar(resource: UserResource = Depends(get_user_resource)):
            return resource.find()
        ```
    """
    return UserResource(UserRepository(db), Validator(db))


def get_user_group_resource(db: Session = Depends(get_db)) -> UserGroupResource:
    """Get UserGroupResource instance."""
    return UserGroupResource(UserGroupRepository(db), Validator(db))


def get_role_resource(db: Session = Depends(get_db)) -> RoleResource:
    """Get RoleResource instance."""
    return RoleResource(RoleRepository(db), Validator(db))


def get_api_key_resource(db: Session = Depends(get_db)) -> ApiKeyResource:
    """Get ApiKeyResource instance."""
    return ApiKeyResource(ApiKeyRepository(db), Validator(db))


# ==================== Context Manager for Resources ====================

class ResourceContext:
    """
    Context manager for the resource layer outside of HTTP requests.

    Usage:
        ```python
        with ResourceContext() as ctx:
            user = ctx.user_resource.create(dto)
        # rollback on exception, session always closed
        ```
    """

    def __init__(self, db: Optional[Session] = None):
        """
        Initialize the resource context.

        Args:
            db: Sesión a usar; si no se indica se abre una nueva
        """
        if db is None:
            from database.db import SessionLocal
            db = SessionLocal()
        self.db: Session = db
        self.validator = Validator(db)

        self._user_resource: Optional[UserResource] = None
        self._user_group_resource: Optional[UserGroupResource] = None
        self._role_resource: Optional[RoleResource] = None
        self._api_key_resource: Optional[ApiKeyResource] = None

    def __enter__(self):
        """Enter the context."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit the context and cleanup."""
        if exc_type is not None:
            # Exception occurred, rollback
            self.db.rollback()
        else:
            # Success, commit
            self.db.commit()

        # Always close the session
        self.db.close()

    @property
    def user_resource(self) -> UserResource:
        """Get or create UserResource instance."""
        if self._user_resource is None:
            self._user_resource = UserResource(UserRepository(self.db), self.validator)
        return self._user_resource

    @property
    def user_group_resource(self) -> UserGroupResource:
        """Get or create UserGroupResource instance."""
        if self._user_group_resource is None:
            self._user_group_resource = UserGroupResource(UserGroupRepository(self.db), self.validator)
        return self._user_group_resource

    @property
    def role_resource(self) -> RoleResource:
        """Get or create RoleResource instance."""
        if self._role_resource is None:
            self._role_resource = RoleResource(RoleRepository(self.db), self.validator)
        return self._role_resource

    @property
    def api_key_resource(self) -> ApiKeyResource:
        """Get or create ApiKeyResource instance."""
        if self._api_key_resource is None:
            self._api_key_resource = ApiKeyResource(ApiKeyRepository(self.db), self.validator)
        return self._api_key_resource
