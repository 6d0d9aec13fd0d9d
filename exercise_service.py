from typing import List, Optional

from client import ApiClient
from logger import setup_logger
from schemas import (
    CreateExerciseRequest,
    Exercise,
    MuscleGroup,
    UpdateExerciseRequest,
    to_wire,
)

logger = setup_logger(__name__)


class ExerciseService:
    """Access the exercise library."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def create_exercise(self, name: str, muscle_group: MuscleGroup | str) -> Exercise:
        req = CreateExerciseRequest(name=name, muscle_group=muscle_group)
        data = self.client.post("/exercises", json=to_wire(req))
        exercise = Exercise.model_validate(data)
        logger.info("Created exercise %s (%s)", exercise.name, exercise.id)
        return exercise

    def get_exercise(self, exercise_id: str) -> Exercise:
        return Exercise.model_validate(self.client.get(f"/exercises/{exercise_id}"))

    def get_exercises_by_muscle_group(
        self, muscle_group: MuscleGroup | str
    ) -> List[Exercise]:
        group = MuscleGroup(muscle_group)
        data = self.client.get("/exercises", params={"muscleGroup": group.value})
        return [Exercise.model_validate(row) for row in data or []]

    def get_library(self) -> dict[MuscleGroup, List[Exercise]]:
        """Fetch every muscle group's exercises, keyed by group."""
        return {
            group: self.get_exercises_by_muscle_group(group) for group in MuscleGroup
        }

    def update_exercise(
        self,
        exercise_id: str,
        name: Optional[str] = None,
        muscle_group: MuscleGroup | str | None = None,
    ) -> Exercise:
        req = UpdateExerciseRequest(name=name, muscle_group=muscle_group)
        data = self.client.put(f"/exercises/{exercise_id}", json=to_wire(req))
        logger.info("Updated exercise %s", exercise_id)
        return Exercise.model_validate(data)

    def delete_exercise(self, exercise_id: str) -> None:
        self.client.delete(f"/exercises/{exercise_id}")
        logger.info("Deleted exercise %s", exercise_id)
