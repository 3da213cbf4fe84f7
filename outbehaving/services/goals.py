"""Goal lifecycle and goal payments"""

import logging
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union

from outbehaving.domain.exceptions import (
    BackendError,
    InvalidRecordError,
    PaymentRefusedError,
    PaymentRollbackError,
    UnreadableResponseError,
)
from outbehaving.domain.forms import GoalForm, GoalUpdateForm, PaymentForm, validate_form
from outbehaving.domain.models import GoalWithProgress
from outbehaving.domain.payments import PaymentPlan, plan_goal_payment
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.errors import ErrorHandler, ErrorType
from outbehaving.infrastructure.observability.logging import log_goal_payment
from outbehaving.infrastructure.observability.metrics import record_goal_payment
from outbehaving.infrastructure.repositories import AccountRepository, GoalRepository
from outbehaving.services.base import SERVICE_ERRORS, Service
from outbehaving.state.app import AppState

logger = logging.getLogger(__name__)


class GoalsService(Service):
    def __init__(self, state: AppState, db: DatabaseClient, user_id: str, error_handler: Optional[ErrorHandler] = None):
        super().__init__(state, error_handler)
        self.user_id = user_id
        self.goal_repo = GoalRepository(db)
        self.account_repo = AccountRepository(db)

    async def load_goals(self) -> Optional[List[GoalWithProgress]]:
        logger.info("Loading goals", extra={"user_id": self.user_id})
        with self._operation(self.state.goals):
            try:
                goals = await self.goal_repo.list_for_user(self.user_id)
            except SERVICE_ERRORS as e:
                self._fail(self.state.goals, e, "GoalsService.load_goals")
                return None
            self.state.goals.set_goals(goals)
            return self.state.goals.goals

    async def create_goal(self, form: Union[GoalForm, Mapping[str, Any]]) -> Optional[GoalWithProgress]:
        logger.info("Creating goal", extra={"user_id": self.user_id})
        with self._operation(self.state.goals):
            try:
                goal_form = validate_form(GoalForm, form)
                payload = goal_form.model_dump(exclude_none=True)
                payload.update(user_id=self.user_id, saved_amount=Decimal("0"))
                goal = await self.goal_repo.create(payload)
            except SERVICE_ERRORS as e:
                self._fail(self.state.goals, e, "GoalsService.create_goal")
                return None
            self.state.notifications.push("success", "Goal created")
            return self.state.goals.add_goal(goal)

    async def update_goal(
        self, goal_id: str, form: Union[GoalUpdateForm, Mapping[str, Any]]
    ) -> Optional[GoalWithProgress]:
        logger.info("Updating goal", extra={"goal_id": goal_id})
        with self._operation(self.state.goals):
            try:
                updates = validate_form(GoalUpdateForm, form).model_dump(exclude_unset=True)
                goal = await self.goal_repo.update(goal_id, updates)
            except SERVICE_ERRORS as e:
                self._fail(self.state.goals, e, "GoalsService.update_goal")
                return None
            self.state.notifications.push("success", "Goal updated")
            return self.state.goals.merge_goal(goal)

    async def delete_goal(self, goal_id: str) -> bool:
        logger.info("Deleting goal", extra={"goal_id": goal_id})
        with self._operation(self.state.goals):
            try:
                await self.goal_repo.delete(goal_id)
            except SERVICE_ERRORS as e:
                self._fail(self.state.goals, e, "GoalsService.delete_goal")
                return False
            self.state.goals.delete_goal(goal_id)
            return True

    async def make_payment(self, goal_id: str, amount: Union[Decimal, str, float]) -> Optional[GoalWithProgress]:
        """
        Move `amount` from the goal's linked account into the goal.

        Flow:
        1. Validate amount and check preconditions (refusal writes nothing)
        2. Debit the account
        3. Credit the goal
        4. If the credit fails, restore the original balance
        """
        logger.info("Goal payment requested", extra={"goal_id": goal_id, "user_id": self.user_id})
        with self._operation(self.state.goals):
            try:
                form = validate_form(PaymentForm, {"amount": amount})
                plan = await self._plan(goal_id, form.amount)
            except PaymentRefusedError as e:
                return self._refuse(goal_id, e)
            except SERVICE_ERRORS as e:
                self._fail(self.state.goals, e, "GoalsService.make_payment")
                return None

            try:
                account = await self.account_repo.update(plan.account_id, {"balance": plan.new_balance})
            except (UnreadableResponseError, InvalidRecordError) as e:
                # Debit may have landed but its reply is unreadable
                await self._roll_back(plan, e)
                return None
            except BackendError as e:
                self._record(plan, "failed")
                self._fail(self.state.goals, e, "GoalsService.make_payment")
                return None

            try:
                goal = await self.goal_repo.update(plan.goal_id, {"saved_amount": plan.new_saved_amount})
            except BackendError as e:
                await self._roll_back(plan, e)
                return None
            except InvalidRecordError as e:
                # Credit landed; only the echoed row is unreadable
                self.state.user.merge_account(account)
                self._record(plan, "applied")
                self._fail(self.state.goals, e, "GoalsService.make_payment")
                return None

            self.state.user.merge_account(account)
            self._record(plan, "applied")
            self.state.notifications.push("success", "Payment applied to goal")
            return self.state.goals.merge_goal(goal)

    async def _plan(self, goal_id: str, amount: Decimal) -> PaymentPlan:
        current = self.state.goals.get_goal(goal_id)
        goal = current.goal if current else await self.goal_repo.get(goal_id)
        account = None
        if goal is not None and goal.linked_account_id:
            account = self.state.user.get_account(goal.linked_account_id)
            if account is None:
                account = await self.account_repo.get(goal.linked_account_id)
        return plan_goal_payment(goal, account, amount)

    def _refuse(self, goal_id: str, refusal: PaymentRefusedError) -> None:
        logger.warning("Goal payment refused", extra={"goal_id": goal_id, "reason": refusal.reason})
        record_goal_payment("refused")
        self.state.goals.set_error(str(refusal), ErrorType.VALIDATION)
        self.state.notifications.push("error", str(refusal))
        return None

    async def _roll_back(self, plan: PaymentPlan, cause: BaseException) -> None:
        """Restore the balance after a debit that was not matched by a goal credit"""
        logger.warning("Goal payment incomplete, restoring account balance", extra={"goal_id": plan.goal_id})
        try:
            restored = await self.account_repo.update(plan.account_id, {"balance": plan.previous_balance})
        except (BackendError, InvalidRecordError) as e:
            self._record(plan, "inconsistent")
            error = PaymentRollbackError(
                f"Account {plan.account_id} debited by {plan.amount} but goal {plan.goal_id} not credited"
            )
            error.__cause__ = e
            self._fail(self.state.goals, error, "GoalsService.make_payment")
            return

        self.state.user.merge_account(restored)
        self._record(plan, "rolled_back")
        self._fail(self.state.goals, cause, "GoalsService.make_payment")

    def _record(self, plan: PaymentPlan, outcome: str) -> None:
        record_goal_payment(outcome)
        log_goal_payment(self.user_id, plan.goal_id, plan.account_id, str(plan.amount), outcome)
