"""
Rank deltas for a saved solution.

Every ranked solution is scored on bytes and chars independently. The store
reports, per scoring, where the golfer stood immediately before and after the
write; this module decides which of those changes are worth logging and which
make the golfer the outright record holder.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class Scoring(str, Enum):
    BYTES = "bytes"
    CHARS = "chars"

    def strokes(self, code: str) -> int:
        if self is Scoring.BYTES:
            return len(code.encode("utf-8"))
        return len(code)


@dataclass(frozen=True)
class RankSnapshot:
    """A golfer's standing on one leaderboard. All None without a solution."""
    strokes: Optional[int] = None
    rank: Optional[int] = None
    joint: Optional[bool] = None


@dataclass(frozen=True)
class RankUpdate:
    scoring: Scoring
    from_: RankSnapshot = field(default_factory=RankSnapshot)
    to: RankSnapshot = field(default_factory=RankSnapshot)
    beat: Optional[int] = None

    @property
    def changed(self) -> bool:
        return self.from_.strokes != self.to.strokes

    @property
    def is_record(self) -> bool:
        """Sole holder of first place."""
        return not self.to.joint and self.to.rank == 1


def ordinal(n: int) -> str:
    """English ordinal suffix for n: 1 -> "st", 12 -> "th", 23 -> "rd"."""
    if 11 <= n % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def _standing(snapshot: RankSnapshot) -> str:
    rank = snapshot.rank or 0
    joint = "joint " if snapshot.joint else ""
    return f"{snapshot.strokes or 0} ({joint}{rank}{ordinal(rank)})"


def describe(golfer_name: str, hole: str, lang: str, update: RankUpdate) -> str:
    return (
        f"{golfer_name}: {hole}/{lang}/{update.scoring.value} "
        f"{_standing(update.from_)} → {_standing(update.to)}"
    )


def interpret(golfer_name: str, hole: str, lang: str, updates: List[RankUpdate]) -> List[RankUpdate]:
    """
    Log every scoring whose strokes changed and return the ones that are new records.

    Unchanged scorings are neither logged nor eligible as records, so resubmitting
    the same code never re-announces a record.
    """
    records = []
    for update in updates:
        if not update.changed:
            continue

        logger.info(describe(golfer_name, hole, lang, update))

        if update.is_record:
            records.append(update)

    return records
