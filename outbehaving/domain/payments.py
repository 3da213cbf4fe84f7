"""Goal payment rules - moving money from a linked account into a goal"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from outbehaving.domain.exceptions import PaymentRefusedError
from outbehaving.domain.models import Account, Goal


@dataclass
class PaymentPlan:
    """The two writes a goal payment performs"""

    goal_id: str
    account_id: str
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    new_saved_amount: Decimal


def plan_goal_payment(goal: Optional[Goal], account: Optional[Account], amount: Decimal) -> PaymentPlan:
    """
    Check preconditions and compute the debit/credit pair.

    Raises:
        PaymentRefusedError: amount not positive, goal unknown, no linked
            account, or balance below amount. Nothing is written.
    """
    amount = Decimal(str(amount))
    if amount <= 0:
        raise PaymentRefusedError("invalid_amount", "Enter a valid amount")
    if goal is None:
        raise PaymentRefusedError("goal_not_found", "Goal not found")
    if not goal.linked_account_id or account is None:
        raise PaymentRefusedError("no_linked_account", "Link an account to this goal first")
    if account.id != goal.linked_account_id:
        raise PaymentRefusedError("no_linked_account", "Account is not linked to this goal")
    if account.balance < amount:
        raise PaymentRefusedError("insufficient_balance", "Insufficient account balance")

    return PaymentPlan(
        goal_id=goal.id,
        account_id=account.id,
        amount=amount,
        previous_balance=account.balance,
        new_balance=account.balance - amount,
        new_saved_amount=goal.saved_amount + amount,
    )
