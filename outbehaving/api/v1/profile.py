"""/v1/profile - profile, linked accounts and avatar"""

from fastapi import APIRouter, Depends, Query, Request

from outbehaving.api.dependencies import (
    CurrentUser,
    get_app_state,
    get_current_user,
    get_db_client,
    get_storage_client,
)
from outbehaving.api.errors import http_error, raise_for_state
from outbehaving.api.v1.schemas import AvatarResponse, ProfileResponse
from outbehaving.domain.forms import ProfileForm
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.clients.storage import StorageClient
from outbehaving.infrastructure.errors import ErrorType
from outbehaving.services.profile import ProfileService
from outbehaving.state.app import AppState

router = APIRouter()

MAX_AVATAR_BYTES = 5 * 1024 * 1024


def get_profile_service(
    user: CurrentUser = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: DatabaseClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
) -> ProfileService:
    return ProfileService(state, db, storage, user.id)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(service: ProfileService = Depends(get_profile_service)):
    profile = await service.load_profile()
    if profile is None or await service.load_accounts() is None:
        raise_for_state(service.state.user)
    return ProfileResponse.from_domain(profile, service.state.user.accounts)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(form: ProfileForm, service: ProfileService = Depends(get_profile_service)):
    profile = await service.update_profile(form)
    if profile is None:
        raise_for_state(service.state.user)
    return ProfileResponse.from_domain(profile, service.state.user.accounts)


@router.post("/profile/avatar", response_model=AvatarResponse)
async def upload_avatar(
    request: Request,
    filename: str = Query(..., min_length=1),
    service: ProfileService = Depends(get_profile_service),
):
    """Raw image body; the content type is taken from the request header"""
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("image/"):
        raise http_error(ErrorType.VALIDATION, "Avatar must be an image")
    if "/" in filename or "\\" in filename:
        raise http_error(ErrorType.VALIDATION, "Invalid file name")

    content = await request.body()
    if not content or len(content) > MAX_AVATAR_BYTES:
        raise http_error(ErrorType.VALIDATION, "Avatar must be between 1 byte and 5 MB")

    url = await service.upload_avatar(filename, content, content_type)
    if url is None:
        raise_for_state(service.state.user)
    return AvatarResponse(avatar_url=url)
