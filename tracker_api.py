from typing import Callable, Optional

import requests

from auth_context import AuthContext
from auth_service import AuthService
from calendar_service import WorkoutCalendar
from client import ApiClient
from config import YamlConfig, load_settings
from exercise_service import ExerciseService
from logger import apply_level
from workout_service import WorkoutService


class TrackerAPI:
    """Wires settings, credentials and the domain services together."""

    def __init__(
        self,
        yaml_path: str = "settings.yaml",
        *,
        session: Optional[requests.Session] = None,
        on_unauthorized: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.yaml_path = yaml_path
        self.settings = load_settings(yaml_path)
        apply_level(self.settings.log_level)
        self.auth = AuthContext.from_storage(YamlConfig(yaml_path))
        self.client = ApiClient(
            self.auth,
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout,
            session=session,
            on_unauthorized=on_unauthorized,
        )
        self.auth_service = AuthService(self.client, self.auth)
        self.exercises = ExerciseService(self.client)
        self.workouts = WorkoutService(self.client)
        self.calendar = WorkoutCalendar(self.workouts)
