from enum import Enum


class ExerciseClass(Enum):
    """Manner in which the unilateral dumbbell biceps curl was performed."""
    EXACTLY_TO_SPEC = "A"
    ELBOWS_TO_FRONT = "B"
    LIFTING_HALFWAY = "C"
    LOWERING_HALFWAY = "D"
    HIPS_TO_FRONT = "E"


OUTCOME_COLUMN = "classe"
SUBJECT_COLUMN = "user_name"

OUTCOME_LABELS = [c.value for c in ExerciseClass]
SUBJECTS = ["adelmo", "carlitos", "charles", "eurico", "jeremy", "pedro"]

SENSOR_LOCATIONS = ["belt", "arm", "dumbbell", "forearm"]


def get_class_description(label: str) -> str:
    try:
        return ExerciseClass(label).name.replace("_", " ").lower()
    except ValueError:
        return "unknown"
