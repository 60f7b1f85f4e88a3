"""Service layer for the member API."""

from member_api.services import auth_service

__all__ = ["auth_service"]
