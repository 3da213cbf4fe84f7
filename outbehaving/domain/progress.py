"""Goal progress derivation - recomputed after every saved/target mutation"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from outbehaving.domain.models import Goal, GoalWithProgress
from outbehaving.utils.formatters import calculate_days_remaining

Amount = Union[int, float, Decimal]


def calculate_progress(saved: Amount, target: Amount) -> float:
    """
    Percentage of target saved, clamped to [0, 100].

    A zero (or negative) target yields 0 rather than an error.

    Example:
        saved=50, target=200 → 25.0
        saved=250, target=200 → 100.0
    """
    saved = Decimal(str(saved))
    target = Decimal(str(target))
    if target <= 0:
        return 0.0
    progress = float(saved / target * 100)
    return min(max(progress, 0.0), 100.0)


def calculate_goal_progress(goal: Goal, today: Optional[date] = None) -> GoalWithProgress:
    """Attach progress percentage, completion flag and days remaining to a goal"""
    progress = calculate_progress(goal.saved_amount, goal.target_amount)
    return GoalWithProgress(
        goal=goal,
        progress_percentage=progress,
        is_complete=progress >= 100,
        days_remaining=calculate_days_remaining(goal.due_date, today) if goal.due_date else None,
    )
