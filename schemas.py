"""Entity schemas shared by the services, the reconciler and the UI.

Wire payloads use camelCase keys; attributes are snake_case. Every model
accepts either form on input and dumps camelCase through :func:`to_wire`.
"""

import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


class MuscleGroup(str, Enum):
    CHEST = "CHEST"
    BACK = "BACK"
    SHOULDERS = "SHOULDERS"
    BICEPS = "BICEPS"
    TRICEPS = "TRICEPS"
    LEGS = "LEGS"
    CORE = "CORE"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return self.value.title()


class SetType(str, Enum):
    WARM_UP = "WARM_UP"
    WORKING = "WORKING"

    @property
    def label(self) -> str:
        return "Warm-up" if self is SetType.WARM_UP else "Working"


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, loc_by_alias=False
    )


def to_wire(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Map a validation error to ``{field: first message}`` for inline display."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("root",)
        field = str(loc[0]) if loc else "root"
        message = err.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


# Auth

class LoginRequest(ApiModel):
    username: str
    password: Annotated[str, Field(min_length=6)]

    @field_validator("username")
    @classmethod
    def username_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username is required")
        return v


class RegisterRequest(ApiModel):
    username: Annotated[str, Field(min_length=3, max_length=50)]
    password: Annotated[str, Field(min_length=6, max_length=50)]
    confirm_password: str = Field(exclude=True)

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("Passwords don't match")
        return v


class AuthenticationResponse(ApiModel):
    username: str
    token: str


class CreateUserResponse(ApiModel):
    id: str
    username: str
    created_at: datetime.datetime


class ErrorMessageResponse(ApiModel):
    code: str
    description: str


# Exercises

ExerciseName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)
]


class Exercise(ApiModel):
    id: str
    name: str
    muscle_group: MuscleGroup

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return str(v)


class CreateExerciseRequest(ApiModel):
    name: ExerciseName
    muscle_group: MuscleGroup


class UpdateExerciseRequest(ApiModel):
    name: Optional[ExerciseName] = None
    muscle_group: Optional[MuscleGroup] = None


# Workouts

Notes = Annotated[str, Field(max_length=250)]


class WorkoutSet(ApiModel):
    """One set as stored on the server.

    Reps may be 0 here: the editing card coerces empty input to 0 and always
    commits. New sets entered through :class:`NewSetForm` require at least one.
    """

    reps: Annotated[int, Field(ge=0)]
    weight: Annotated[float, Field(ge=0)]
    set_type: SetType = SetType.WORKING
    notes: Optional[Notes] = None


class NewSetForm(ApiModel):
    reps: Annotated[int, Field(ge=1)]
    weight: Annotated[float, Field(ge=0)]
    set_type: SetType = SetType.WORKING
    notes: Optional[Notes] = None

    def to_set(self) -> WorkoutSet:
        return WorkoutSet(
            reps=self.reps,
            weight=self.weight,
            set_type=self.set_type,
            notes=self.notes,
        )


class WorkoutExerciseRequest(ApiModel):
    exercise_id: str
    exercise_order: Annotated[int, Field(ge=1)]
    sets: list[WorkoutSet]


class WorkoutRequest(ApiModel):
    date: datetime.date
    workout_exercises: list[WorkoutExerciseRequest]


class WorkoutExercise(ApiModel):
    id: Optional[str] = None
    exercise: Exercise
    exercise_order: int
    sets: list[WorkoutSet] = []

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return None if v is None else str(v)


class Workout(ApiModel):
    id: str
    date: datetime.date
    workout_exercises: list[WorkoutExercise] = []

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return str(v)

    @field_validator("workout_exercises")
    @classmethod
    def in_order(cls, v: list[WorkoutExercise]) -> list[WorkoutExercise]:
        return sorted(v, key=lambda we: we.exercise_order)


class WorkoutSummary(ApiModel):
    id: str
    date: datetime.date

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return str(v)
