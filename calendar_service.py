import calendar
import datetime
from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from schemas import WorkoutSummary
from workout_reconciler import LoadedWorkout, NoWorkout, WorkoutState
from workout_service import WorkoutService

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def month_range(day: datetime.date) -> tuple[datetime.date, datetime.date]:
    """Return the first and last day of ``day``'s month."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def highlighted_dates(summaries: Iterable[WorkoutSummary]) -> set[datetime.date]:
    return {s.date for s in summaries}


def find_summary(
    summaries: Iterable[WorkoutSummary], day: datetime.date
) -> Optional[WorkoutSummary]:
    for summary in summaries:
        if summary.date == day:
            return summary
    return None


def month_grid(year: int, month: int, highlighted: set[datetime.date]) -> pd.DataFrame:
    """One row per day of the month with its weekday, week row and workout flag."""
    first = datetime.date(year, month, 1)
    days = pd.date_range(first, month_range(first)[1], freq="D")
    df = pd.DataFrame({"date": days})
    df["day"] = df["date"].dt.day
    df["weekday"] = df["date"].dt.day_name()
    # week row within the month grid, Monday first
    df["week"] = (df["day"] + first.weekday() - 1) // 7
    df["has_workout"] = [d.date() in highlighted for d in days]
    return df


@dataclass(frozen=True)
class CalendarView:
    visible_month: datetime.date
    highlighted: frozenset
    state: WorkoutState

    @property
    def workout_count(self) -> int:
        return len(self.highlighted)


class WorkoutCalendar:
    """Resolve the selected date to highlighted days and the day's workout."""

    def __init__(self, workouts: WorkoutService) -> None:
        self.workouts = workouts

    def select(
        self, day: datetime.date, visible_month: Optional[datetime.date] = None
    ) -> CalendarView:
        visible_month = visible_month or day
        start, end = month_range(visible_month)
        summaries = self.workouts.get_workouts(start, end)
        summary = find_summary(summaries, day)
        if summary is None and not start <= day <= end:
            # selection outside the visible month still needs its workout
            summary = find_summary(self.workouts.get_workouts(day, day), day)
        if summary is None:
            state: WorkoutState = NoWorkout(day)
        else:
            state = LoadedWorkout(self.workouts.get_workout(summary.id))
        return CalendarView(
            visible_month=start,
            highlighted=frozenset(highlighted_dates(summaries)),
            state=state,
        )
