"""Turn a single local workout edit into one full-replacement save action.

The server only ever receives the complete exercise/set list of a workout.
After every edit ``exerciseOrder`` is recomputed as the 1-based position of
each exercise, so orders are always ``1..N`` without gaps or duplicates.
"""

import datetime
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

from schemas import (
    Workout,
    WorkoutExercise,
    WorkoutExerciseRequest,
    WorkoutRequest,
    WorkoutSet,
)


class ReconcileError(ValueError):
    pass


@dataclass(frozen=True)
class LoadedWorkout:
    workout: Workout

    @property
    def date(self) -> datetime.date:
        return self.workout.date


@dataclass(frozen=True)
class NoWorkout:
    date: datetime.date


WorkoutState = Union[LoadedWorkout, NoWorkout]


@dataclass(frozen=True)
class CreateWorkout:
    payload: WorkoutRequest


@dataclass(frozen=True)
class UpdateWorkout:
    workout_id: str
    payload: WorkoutRequest


@dataclass(frozen=True)
class DeleteWorkout:
    workout_id: str


SaveAction = Union[CreateWorkout, UpdateWorkout, DeleteWorkout]


@dataclass(frozen=True)
class Entry:
    """An exercise reference with its sets, before orders are assigned."""

    exercise_id: str
    sets: tuple[WorkoutSet, ...]


def entries_of(workout: Workout) -> List[Entry]:
    return [
        Entry(we.exercise.id, tuple(we.sets))
        for we in sorted(workout.workout_exercises, key=lambda we: we.exercise_order)
    ]


def build_payload(date: datetime.date, entries: Iterable[Entry]) -> WorkoutRequest:
    return WorkoutRequest(
        date=date,
        workout_exercises=[
            WorkoutExerciseRequest(
                exercise_id=entry.exercise_id,
                exercise_order=order,
                sets=list(entry.sets),
            )
            for order, entry in enumerate(entries, start=1)
        ],
    )


def add_exercise(
    state: WorkoutState, exercise_id: str, sets: Sequence[WorkoutSet]
) -> SaveAction:
    """Append ``exercise_id`` as the last exercise of the day's workout."""
    new_entry = Entry(str(exercise_id), tuple(sets))
    if isinstance(state, NoWorkout):
        return CreateWorkout(build_payload(state.date, [new_entry]))
    entries = entries_of(state.workout) + [new_entry]
    return UpdateWorkout(state.workout.id, build_payload(state.date, entries))


def delete_exercise(state: WorkoutState, position: int) -> SaveAction:
    """Remove the exercise at ``position`` (0-based); drop the workout if empty."""
    workout = _require_workout(state)
    entries = entries_of(workout)
    _check_position(entries, position)
    del entries[position]
    if not entries:
        return DeleteWorkout(workout.id)
    return UpdateWorkout(workout.id, build_payload(workout.date, entries))


def replace_sets(
    state: WorkoutState, position: int, sets: Sequence[WorkoutSet]
) -> SaveAction:
    """Swap in new sets for one exercise, carrying every other one through."""
    workout = _require_workout(state)
    entries = entries_of(workout)
    _check_position(entries, position)
    entries[position] = Entry(entries[position].exercise_id, tuple(sets))
    return UpdateWorkout(workout.id, build_payload(workout.date, entries))


def workout_exercises(state: WorkoutState) -> List[WorkoutExercise]:
    if isinstance(state, NoWorkout):
        return []
    return sorted(state.workout.workout_exercises, key=lambda we: we.exercise_order)


def _require_workout(state: WorkoutState) -> Workout:
    if isinstance(state, NoWorkout):
        raise ReconcileError(f"No workout logged on {state.date.isoformat()}")
    return state.workout


def _check_position(entries: Sequence[Entry], position: int) -> None:
    if not 0 <= position < len(entries):
        raise ReconcileError(
            f"Exercise position {position} out of range for {len(entries)} exercises"
        )
