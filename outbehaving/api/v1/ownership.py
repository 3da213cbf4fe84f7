"""/v1/ownership - membership tier, points and rewards"""

from fastapi import APIRouter, Depends

from outbehaving.api.dependencies import CurrentUser, get_app_state, get_current_user, get_db_client
from outbehaving.api.errors import raise_for_state
from outbehaving.api.v1.schemas import OwnershipResponse
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.services.ownership import OwnershipService
from outbehaving.state.app import AppState

router = APIRouter()


def get_ownership_service(
    user: CurrentUser = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: DatabaseClient = Depends(get_db_client),
) -> OwnershipService:
    return OwnershipService(state, db, user.id)


def _response(service: OwnershipService) -> OwnershipResponse:
    ownership = service.state.ownership
    return OwnershipResponse.from_domain(ownership.membership, ownership.engagement, ownership.available_rewards)


@router.get("/ownership", response_model=OwnershipResponse)
async def get_ownership(service: OwnershipService = Depends(get_ownership_service)):
    if await service.load_engagement_data() is None:
        raise_for_state(service.state.ownership)
    return _response(service)


@router.post("/ownership/rewards/{reward_id}/redeem", response_model=OwnershipResponse)
async def redeem_reward(reward_id: str, service: OwnershipService = Depends(get_ownership_service)):
    # Eligibility is judged against freshly loaded points and redemptions
    if await service.load_engagement_data() is None:
        raise_for_state(service.state.ownership)
    if not await service.redeem_reward(reward_id):
        raise_for_state(service.state.ownership)
    return _response(service)
