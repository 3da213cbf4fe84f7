"""POST /v1/auth/* - sign-up, sign-in and sign-out"""

from fastapi import APIRouter, Depends, Response

from outbehaving.api.dependencies import CurrentUser, get_backend_config, get_current_user, get_registry
from outbehaving.api.errors import raise_for_state
from outbehaving.api.v1.schemas import SessionResponse, SignUpResponse
from outbehaving.domain.forms import SignInForm, SignUpForm
from outbehaving.infrastructure.clients.auth import AuthClient
from outbehaving.infrastructure.clients.base import BackendConfig
from outbehaving.services.auth import AuthService
from outbehaving.state.app import AppState, StateRegistry

router = APIRouter()


@router.post("/auth/signup", response_model=SignUpResponse, status_code=201)
async def sign_up(form: SignUpForm, config: BackendConfig = Depends(get_backend_config)):
    # No user yet, so the outcome is tracked on throwaway state
    state = AppState()
    user = await AuthService(state, AuthClient(config)).sign_up(form)
    if user is None:
        raise_for_state(state.auth)
    return SignUpResponse(user_id=user.id, email=user.email)


@router.post("/auth/signin", response_model=SessionResponse)
async def sign_in(
    form: SignInForm,
    config: BackendConfig = Depends(get_backend_config),
    registry: StateRegistry = Depends(get_registry),
):
    state = AppState()
    session = await AuthService(state, AuthClient(config)).sign_in(form)
    if session is None:
        raise_for_state(state.auth)

    registry.get(session.user.id).auth.set_session(session)
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=session.user.id,
        email=session.user.email,
    )


@router.post("/auth/signout", status_code=204)
async def sign_out(
    user: CurrentUser = Depends(get_current_user),
    config: BackendConfig = Depends(get_backend_config),
    registry: StateRegistry = Depends(get_registry),
):
    state = registry.get(user.id)
    service = AuthService(state, AuthClient(config, access_token=user.access_token))
    await service.initialize()
    try:
        if not await service.sign_out():
            raise_for_state(state.auth)
    finally:
        service.close()
    registry.drop(user.id)
    return Response(status_code=204)
