from exercise_service import ExerciseService
from schemas import MuscleGroup

DEFAULT_EXERCISES: list[tuple[str, MuscleGroup]] = [
    ("Bench Press", MuscleGroup.CHEST),
    ("Incline Dumbbell Press", MuscleGroup.CHEST),
    ("Cable Flyes", MuscleGroup.CHEST),
    ("Push-ups", MuscleGroup.CHEST),
    ("Deadlift", MuscleGroup.BACK),
    ("Pull-ups", MuscleGroup.BACK),
    ("Barbell Row", MuscleGroup.BACK),
    ("Lat Pulldown", MuscleGroup.BACK),
    ("Overhead Press", MuscleGroup.SHOULDERS),
    ("Lateral Raises", MuscleGroup.SHOULDERS),
    ("Face Pulls", MuscleGroup.SHOULDERS),
    ("Arnold Press", MuscleGroup.SHOULDERS),
    ("Barbell Curl", MuscleGroup.BICEPS),
    ("Hammer Curls", MuscleGroup.BICEPS),
    ("Preacher Curl", MuscleGroup.BICEPS),
    ("Close Grip Bench", MuscleGroup.TRICEPS),
    ("Tricep Dips", MuscleGroup.TRICEPS),
    ("Overhead Extension", MuscleGroup.TRICEPS),
    ("Squat", MuscleGroup.LEGS),
    ("Romanian Deadlift", MuscleGroup.LEGS),
    ("Leg Press", MuscleGroup.LEGS),
    ("Leg Curl", MuscleGroup.LEGS),
    ("Calf Raises", MuscleGroup.LEGS),
    ("Hanging Leg Raises", MuscleGroup.CORE),
    ("Plank", MuscleGroup.CORE),
    ("Cable Crunches", MuscleGroup.CORE),
    ("Running", MuscleGroup.OTHER),
    ("Cycling", MuscleGroup.OTHER),
    ("Rowing", MuscleGroup.OTHER),
]


def seed(exercises: ExerciseService) -> int:
    """Create the default exercises the user does not have yet.

    Returns the number of exercises created.
    """
    library = exercises.get_library()
    created = 0
    for name, group in DEFAULT_EXERCISES:
        existing = {e.name.lower() for e in library.get(group, [])}
        if name.lower() in existing:
            continue
        exercises.create_exercise(name, group)
        created += 1
    return created
