"""Goals container - every stored goal carries freshly computed progress"""

import dataclasses
import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional

from outbehaving.domain.models import Goal, GoalWithProgress
from outbehaving.domain.progress import calculate_goal_progress
from outbehaving.state.base import StatusFlags

logger = logging.getLogger(__name__)

GOAL_FIELDS = {f.name for f in dataclasses.fields(Goal)} - {"id", "user_id"}


class GoalsState(StatusFlags):
    def __init__(self, today: Callable[[], date] = date.today):
        super().__init__()
        self._today = today
        self.reset()

    def _derive(self, goal: Goal) -> GoalWithProgress:
        return calculate_goal_progress(goal, self._today())

    def set_goals(self, goals: Iterable[Goal]) -> None:
        goals = list(goals)
        logger.debug("Setting goals in store", extra={"count": len(goals)})
        self.goals: List[GoalWithProgress] = [self._derive(goal) for goal in goals]
        if self.selected_goal and not self.get_goal(self.selected_goal.id):
            self.selected_goal = None

    def add_goal(self, goal: Goal) -> GoalWithProgress:
        logger.debug("Adding goal to store", extra={"goal_id": goal.id})
        derived = self._derive(goal)
        self.goals.append(derived)
        return derived

    def merge_goal(self, goal: Goal) -> GoalWithProgress:
        """Replace the stored goal with an authoritative record, or add it"""
        if self.get_goal(goal.id) is None:
            return self.add_goal(goal)
        return self._replace(goal)

    def update_goal(self, goal_id: str, updates: Mapping[str, Any]) -> Optional[GoalWithProgress]:
        """Partial-field merge; derived fields are recomputed"""
        logger.debug("Updating goal in store", extra={"goal_id": goal_id, "fields": sorted(updates)})
        unknown = set(updates) - GOAL_FIELDS
        if unknown:
            raise ValueError(f"Unknown goal fields: {', '.join(sorted(unknown))}")

        current = self.get_goal(goal_id)
        if current is None:
            return None
        return self._replace(dataclasses.replace(current.goal, **updates))

    def _replace(self, goal: Goal) -> GoalWithProgress:
        derived = self._derive(goal)
        self.goals = [derived if g.id == goal.id else g for g in self.goals]
        if self.selected_goal and self.selected_goal.id == goal.id:
            self.selected_goal = derived
        return derived

    def delete_goal(self, goal_id: str) -> None:
        logger.debug("Deleting goal from store", extra={"goal_id": goal_id})
        self.goals = [g for g in self.goals if g.id != goal_id]
        if self.selected_goal and self.selected_goal.id == goal_id:
            self.selected_goal = None

    def get_goal(self, goal_id: str) -> Optional[GoalWithProgress]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def set_selected_goal(self, goal_id: Optional[str]) -> Optional[GoalWithProgress]:
        logger.debug("Setting selected goal", extra={"goal_id": goal_id})
        self.selected_goal = self.get_goal(goal_id) if goal_id else None
        return self.selected_goal

    def reset(self) -> None:
        logger.info("Resetting goals store")
        self.goals = []
        self.selected_goal: Optional[GoalWithProgress] = None
        self._reset_status()
