"""Local draft state of an editable exercise card.

A card is either viewing the server's sets or editing a private draft of
them. Leaving edit mode always commits the draft; there is no cancel.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from logger import setup_logger
from schemas import SetType, WorkoutSet

logger = setup_logger(__name__)

NOTES_MAX_LENGTH = 250


class CardMode(Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class CommitTrigger(Enum):
    SAVE = "save"
    ENTER = "enter"
    OUTSIDE_CLICK = "outside_click"


def coerce_numeric(raw: Any, previous: float, integer: bool = False) -> float:
    """Parse a weight or reps input.

    Empty, ``None`` and non-numeric input becomes 0. A negative number is
    ignored and ``previous`` is kept.
    """
    if raw is None:
        return 0
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return 0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    if value < 0:
        return previous
    return int(value) if integer else value


@dataclass
class DraftSet:
    reps: int
    weight: float
    set_type: SetType = SetType.WORKING
    notes: str = ""

    @classmethod
    def from_set(cls, s: WorkoutSet) -> "DraftSet":
        return cls(s.reps, s.weight, s.set_type, s.notes or "")

    def to_set(self) -> WorkoutSet:
        return WorkoutSet(
            reps=self.reps,
            weight=self.weight,
            set_type=self.set_type,
            notes=self.notes or None,
        )


@dataclass
class ExerciseCardState:
    mode: CardMode = CardMode.VIEWING
    draft: List[DraftSet] = field(default_factory=list)

    @property
    def is_editing(self) -> bool:
        return self.mode is CardMode.EDITING

    def begin_edit(self, sets: Sequence[WorkoutSet]) -> None:
        if self.is_editing:
            return
        self.draft = [DraftSet.from_set(s) for s in sets]
        self.mode = CardMode.EDITING

    def set_field(self, index: int, name: str, raw: Any) -> None:
        """Apply one input change to the draft."""
        self._require_editing()
        row = self.draft[index]
        if name == "weight":
            row.weight = float(coerce_numeric(raw, row.weight))
        elif name == "reps":
            row.reps = int(coerce_numeric(raw, row.reps, integer=True))
        elif name == "set_type":
            row.set_type = SetType(raw)
        elif name == "notes":
            row.notes = ("" if raw is None else str(raw))[:NOTES_MAX_LENGTH]
        else:
            raise KeyError(name)

    def add_set(self) -> None:
        self._require_editing()
        if self.draft:
            last = self.draft[-1]
            self.draft.append(DraftSet(last.reps, last.weight, last.set_type))
        else:
            self.draft.append(DraftSet(reps=10, weight=20.0))

    def remove_set(self, index: int) -> None:
        self._require_editing()
        del self.draft[index]

    def commit(
        self,
        trigger: CommitTrigger,
        on_commit: Optional[Callable[[List[WorkoutSet]], Any]] = None,
    ) -> Optional[List[WorkoutSet]]:
        """Leave edit mode and hand the draft to ``on_commit`` once.

        Returns the committed sets, or ``None`` when the card was not editing.
        """
        if not self.is_editing:
            return None
        sets = [row.to_set() for row in self.draft]
        logger.debug("Committing %d sets on %s", len(sets), trigger.value)
        self.mode = CardMode.VIEWING
        self.draft = []
        if on_commit is not None:
            on_commit(sets)
        return sets

    def _require_editing(self) -> None:
        if not self.is_editing:
            raise RuntimeError("card is not in edit mode")
