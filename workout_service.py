import datetime
from typing import List, Optional

from client import ApiClient
from logger import setup_logger
from schemas import Workout, WorkoutRequest, WorkoutSummary, to_wire
from workout_reconciler import (
    CreateWorkout,
    DeleteWorkout,
    SaveAction,
    UpdateWorkout,
)

logger = setup_logger(__name__)

# date ranges kept in the summary cache
CACHE_SIZE = 12


class WorkoutService:
    """Read and write workouts; caches date-range summaries between mutations."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self._cache: dict[tuple, List[WorkoutSummary]] = {}

    def clear_cache(self) -> None:
        """Drop cached summaries so the next range query refetches."""
        self._cache.clear()

    def create_workout(self, payload: WorkoutRequest) -> Workout:
        data = self.client.post("/workouts", json=to_wire(payload))
        self.clear_cache()
        workout = Workout.model_validate(data)
        logger.info("Created workout %s on %s", workout.id, workout.date)
        return workout

    def get_workout(self, workout_id: str) -> Workout:
        return Workout.model_validate(self.client.get(f"/workouts/{workout_id}"))

    def get_workouts(
        self, start: datetime.date, end: datetime.date
    ) -> List[WorkoutSummary]:
        key = (start.isoformat(), end.isoformat())
        if key not in self._cache:
            data = self.client.get(
                "/workouts", params={"startDate": key[0], "endDate": key[1]}
            )
            if len(self._cache) >= CACHE_SIZE:
                # evict the oldest range
                del self._cache[next(iter(self._cache))]
            self._cache[key] = [WorkoutSummary.model_validate(r) for r in data or []]
        return list(self._cache[key])

    def update_workout(self, workout_id: str, payload: WorkoutRequest) -> Workout:
        data = self.client.put(f"/workouts/{workout_id}", json=to_wire(payload))
        self.clear_cache()
        logger.info(
            "Saved workout %s with %d exercises",
            workout_id,
            len(payload.workout_exercises),
        )
        return Workout.model_validate(data)

    def delete_workout(self, workout_id: str) -> None:
        self.client.delete(f"/workouts/{workout_id}")
        self.clear_cache()
        logger.info("Deleted workout %s", workout_id)

    def apply(self, action: SaveAction) -> Optional[Workout]:
        """Issue the one request ``action`` stands for.

        Returns the saved workout, or ``None`` when the workout was deleted.
        """
        if isinstance(action, CreateWorkout):
            return self.create_workout(action.payload)
        if isinstance(action, UpdateWorkout):
            return self.update_workout(action.workout_id, action.payload)
        if isinstance(action, DeleteWorkout):
            self.delete_workout(action.workout_id)
            return None
        raise TypeError(f"Unknown save action {action!r}")
