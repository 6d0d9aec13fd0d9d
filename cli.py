import argparse
import datetime
import getpass
import os
from typing import Optional

from pydantic import ValidationError

from client import ApiError
from config import APP_VERSION
from schemas import MuscleGroup, NewSetForm, SetType, field_errors
from seed_sample_data import seed
from tracker_api import TrackerAPI
from workout_reconciler import (
    LoadedWorkout,
    NoWorkout,
    ReconcileError,
    WorkoutState,
    add_exercise,
    delete_exercise,
    workout_exercises,
)


def login(api: TrackerAPI, username: str, password: Optional[str] = None) -> None:
    password = password if password is not None else getpass.getpass()
    resp = api.auth_service.login(username, password)
    print(f"Signed in as {resp.username}")


def register(
    api: TrackerAPI, username: str, password: str, confirm: Optional[str] = None
) -> None:
    user = api.auth_service.register(username, password, confirm or password)
    print(f"Registered {user.username}. Sign in to start logging.")


def logout(api: TrackerAPI) -> None:
    api.auth_service.logout()
    print("Signed out")


def list_exercises(api: TrackerAPI, muscle_group: Optional[str] = None) -> None:
    groups = [MuscleGroup(muscle_group)] if muscle_group else list(MuscleGroup)
    for group in groups:
        rows = api.exercises.get_exercises_by_muscle_group(group)
        if not rows:
            continue
        print(f"{group.label}:")
        for ex in rows:
            print(f"  [{ex.id}] {ex.name}")


def create_exercise(api: TrackerAPI, name: str, muscle_group: str) -> None:
    ex = api.exercises.create_exercise(name, muscle_group)
    print(f"Created exercise {ex.id}: {ex.name}")


def _state_for(api: TrackerAPI, day: datetime.date) -> WorkoutState:
    return api.calendar.select(day).state


def show_workout(api: TrackerAPI, day: datetime.date) -> None:
    state = _state_for(api, day)
    if isinstance(state, NoWorkout):
        print(f"No workout logged on {day.isoformat()}")
        return
    print(f"Workout {state.workout.id} on {day.isoformat()}")
    for we in workout_exercises(state):
        print(f"{we.exercise_order}. {we.exercise.name}")
        for idx, s in enumerate(we.sets, start=1):
            note = f" - {s.notes}" if s.notes else ""
            print(f"   Set {idx}: {s.weight} kg x {s.reps} ({s.set_type.label}){note}")


def add_to_workout(
    api: TrackerAPI,
    day: datetime.date,
    exercise_id: str,
    weight: float,
    reps: int,
    set_type: str = SetType.WORKING.value,
    notes: Optional[str] = None,
) -> None:
    first_set = NewSetForm(reps=reps, weight=weight, set_type=set_type, notes=notes)
    action = add_exercise(_state_for(api, day), exercise_id, [first_set.to_set()])
    workout = api.workouts.apply(action)
    print(f"Workout {workout.id} now has {len(workout.workout_exercises)} exercises")


def remove_from_workout(api: TrackerAPI, day: datetime.date, position: int) -> None:
    state = _state_for(api, day)
    workout = api.workouts.apply(delete_exercise(state, position - 1))
    if workout is None and isinstance(state, LoadedWorkout):
        print(f"Workout {state.workout.id} deleted")
    elif workout is not None:
        print(f"Workout {workout.id} now has {len(workout.workout_exercises)} exercises")


def demo_data(api: TrackerAPI) -> None:
    """Populate the exercise library with the default exercises."""
    created = seed(api.exercises)
    if created:
        print(f"Added {created} exercises")
    else:
        print("Exercise library already complete")


def _date(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Workout tracker commands")
    parser.add_argument("--yaml", default=os.environ.get("YAML_PATH", "settings.yaml"))
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    lin = sub.add_parser("login")
    lin.add_argument("--username", required=True)
    lin.add_argument("--password")

    reg = sub.add_parser("register")
    reg.add_argument("--username", required=True)
    reg.add_argument("--password", required=True)
    reg.add_argument("--confirm")

    sub.add_parser("logout")

    exs = sub.add_parser("exercises")
    exs.add_argument("--muscle-group", choices=[g.value for g in MuscleGroup])

    cex = sub.add_parser("create-exercise")
    cex.add_argument("--name", required=True)
    cex.add_argument("--muscle-group", choices=[g.value for g in MuscleGroup], required=True)

    show = sub.add_parser("show")
    show.add_argument("--date", type=_date, default=datetime.date.today())

    add = sub.add_parser("add")
    add.add_argument("--date", type=_date, default=datetime.date.today())
    add.add_argument("--exercise-id", required=True)
    add.add_argument("--weight", type=float, default=20.0)
    add.add_argument("--reps", type=int, default=10)
    add.add_argument("--set-type", choices=[t.value for t in SetType], default=SetType.WORKING.value)
    add.add_argument("--notes")

    rem = sub.add_parser("remove")
    rem.add_argument("--date", type=_date, default=datetime.date.today())
    rem.add_argument("--position", type=int, required=True)

    sub.add_parser("demo")

    args = parser.parse_args(argv)
    api = TrackerAPI(yaml_path=args.yaml)

    try:
        if args.cmd == "login":
            login(api, args.username, args.password)
        elif args.cmd == "register":
            register(api, args.username, args.password, args.confirm)
        elif args.cmd == "logout":
            logout(api)
        elif args.cmd == "exercises":
            list_exercises(api, args.muscle_group)
        elif args.cmd == "create-exercise":
            create_exercise(api, args.name, args.muscle_group)
        elif args.cmd == "show":
            show_workout(api, args.date)
        elif args.cmd == "add":
            add_to_workout(
                api, args.date, args.exercise_id, args.weight, args.reps, args.set_type, args.notes
            )
        elif args.cmd == "remove":
            remove_from_workout(api, args.date, args.position)
        elif args.cmd == "demo":
            demo_data(api)
    except ValidationError as e:
        msgs = "; ".join(f"{k}: {v}" for k, v in field_errors(e).items())
        parser.exit(2, f"Invalid input: {msgs}\n")
    except ApiError as e:
        parser.exit(1, f"Request failed ({e.status_code}): {e.description}\n")
    except ReconcileError as e:
        parser.exit(1, f"{e}\n")


if __name__ == "__main__":
    main()
