"""Dependency injection for FastAPI endpoints"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from outbehaving.api.errors import http_error
from outbehaving.config import Settings
from outbehaving.domain.exceptions import BackendError, InvalidRecordError
from outbehaving.infrastructure.clients.auth import AuthClient
from outbehaving.infrastructure.clients.base import BackendConfig
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.clients.storage import StorageClient
from outbehaving.infrastructure.errors import ErrorType, classify_exception
from outbehaving.state.app import AppState, StateRegistry


@dataclass
class CurrentUser:
    id: str
    access_token: str
    email: Optional[str] = None


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_backend_config(request: Request) -> BackendConfig:
    return request.app.state.backend_config


def get_registry(request: Request) -> StateRegistry:
    return request.app.state.registry


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    config: BackendConfig = Depends(get_backend_config),
) -> CurrentUser:
    """Resolve the caller from a bearer token via the auth gateway"""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise http_error(ErrorType.AUTHENTICATION)

    try:
        user = await AuthClient(config, access_token=token).get_current_user()
    except (BackendError, InvalidRecordError) as e:
        raise http_error(classify_exception(e)) from e
    if user is None:
        raise http_error(ErrorType.AUTHENTICATION)
    return CurrentUser(id=user.id, access_token=token, email=user.email)


def get_app_state(
    user: CurrentUser = Depends(get_current_user),
    registry: StateRegistry = Depends(get_registry),
) -> AppState:
    return registry.get(user.id)


def get_db_client(
    user: CurrentUser = Depends(get_current_user),
    config: BackendConfig = Depends(get_backend_config),
) -> DatabaseClient:
    """Database gateway acting with the caller's token"""
    return DatabaseClient(config, access_token=user.access_token)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_client(
    user: CurrentUser = Depends(get_current_user),
    config: BackendConfig = Depends(get_backend_config),
    app_settings: Settings = Depends(get_settings),
) -> StorageClient:
    return StorageClient(config, bucket=app_settings.avatars_bucket, access_token=user.access_token)
