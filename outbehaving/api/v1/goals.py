"""/v1/goals - goal CRUD and goal payments"""

from fastapi import APIRouter, Depends, Response

from outbehaving.api.dependencies import CurrentUser, get_app_state, get_current_user, get_db_client
from outbehaving.api.errors import http_error, raise_for_state
from outbehaving.api.v1.schemas import AccountResponse, GoalListResponse, GoalResponse, PaymentResponse
from outbehaving.domain.forms import GoalForm, GoalUpdateForm, PaymentForm
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.errors import ErrorType
from outbehaving.services.goals import GoalsService
from outbehaving.state.app import AppState

router = APIRouter()


def get_goals_service(
    user: CurrentUser = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: DatabaseClient = Depends(get_db_client),
) -> GoalsService:
    return GoalsService(state, db, user.id)


@router.get("/goals", response_model=GoalListResponse)
async def list_goals(service: GoalsService = Depends(get_goals_service)):
    goals = await service.load_goals()
    if goals is None:
        raise_for_state(service.state.goals)
    return GoalListResponse(goals=[GoalResponse.from_domain(g) for g in goals])


@router.get("/goals/{goal_id}", response_model=GoalResponse)
async def get_goal(goal_id: str, service: GoalsService = Depends(get_goals_service)):
    if service.state.goals.get_goal(goal_id) is None and await service.load_goals() is None:
        raise_for_state(service.state.goals)
    goal = service.state.goals.set_selected_goal(goal_id)
    if goal is None:
        raise http_error(ErrorType.NOT_FOUND, "Goal not found")
    return GoalResponse.from_domain(goal)


@router.post("/goals", response_model=GoalResponse, status_code=201)
async def create_goal(form: GoalForm, service: GoalsService = Depends(get_goals_service)):
    goal = await service.create_goal(form)
    if goal is None:
        raise_for_state(service.state.goals)
    return GoalResponse.from_domain(goal)


@router.patch("/goals/{goal_id}", response_model=GoalResponse)
async def update_goal(goal_id: str, form: GoalUpdateForm, service: GoalsService = Depends(get_goals_service)):
    goal = await service.update_goal(goal_id, form)
    if goal is None:
        raise_for_state(service.state.goals)
    return GoalResponse.from_domain(goal)


@router.delete("/goals/{goal_id}", status_code=204)
async def delete_goal(goal_id: str, service: GoalsService = Depends(get_goals_service)):
    if not await service.delete_goal(goal_id):
        raise_for_state(service.state.goals)
    return Response(status_code=204)


@router.post("/goals/{goal_id}/payments", response_model=PaymentResponse)
async def pay_into_goal(goal_id: str, form: PaymentForm, service: GoalsService = Depends(get_goals_service)):
    goal = await service.make_payment(goal_id, form.amount)
    if goal is None:
        raise_for_state(service.state.goals)

    account = service.state.user.get_account(goal.goal.linked_account_id)
    return PaymentResponse(
        goal=GoalResponse.from_domain(goal),
        account=AccountResponse.from_domain(account) if account else None,
    )
