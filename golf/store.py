"""
Leaderboard persistence.

record_pass is the only write that touches ranks. It runs as one transaction:
the before and after snapshots are read inside the same transaction as the
upsert, so no other solution can land between them. Engines created with
golf.db.make_engine make that transaction serializable.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db.models import Points, Solution, Trophy
from .ranks import RankSnapshot, RankUpdate, Scoring
from .trophies import is_trophy

logger = logging.getLogger(__name__)

# Trophies earned as part of saving a solution, keyed on the saved hole
HOLE_TROPHIES = {
    "fizz-buzz": "interview-ready",
    "quine": "ouroboros",
}
BAKERS_DOZEN = 13


@dataclass
class RecordedPass:
    """Outcome of saving a passing solution."""
    trophies: Set[str]
    bytes: RankUpdate
    chars: RankUpdate

    @property
    def updates(self) -> List[RankUpdate]:
        return [self.bytes, self.chars]


class LeaderboardStore:
    """Leaderboard operations over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ============ Writes ============

    def record_pass(self, code: str, hole: str, lang: str, golfer_id: int) -> RecordedPass:
        """
        Save a passing solution and report the rank change on both scorings.

        Either everything (solution rows, points, trophies) is committed or
        nothing is and the error propagates.
        """
        try:
            updates = {
                scoring: self._save(code, hole, lang, golfer_id, scoring)
                for scoring in Scoring
            }
            self._refresh_points(hole)
            trophies = self._earned_trophies(hole, golfer_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return RecordedPass(
            trophies=trophies,
            bytes=updates[Scoring.BYTES],
            chars=updates[Scoring.CHARS],
        )

    def grant_trophy(self, golfer_id: int, trophy: str) -> bool:
        """Grant a trophy if the golfer doesn't have it. True only when newly granted."""
        try:
            granted = self._insert_trophy(golfer_id, trophy)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return granted

    def release(self) -> None:
        """End any open read transaction so its lock isn't held until the session closes."""
        self.db.rollback()

    # ============ Aggregate queries ============

    def langs_solved(self, golfer_id: int) -> int:
        """Distinct languages with at least one non-failing solution."""
        return self.db.query(func.count(func.distinct(Solution.lang))).filter(
            Solution.golfer_id == golfer_id,
            Solution.failing == False,  # noqa: E712
        ).scalar() or 0

    def points(self, golfer_id: int, scoring: Scoring) -> int:
        row = self.db.query(Points.points).filter(
            Points.golfer_id == golfer_id,
            Points.scoring == scoring.value,
        ).first()
        return row[0] if row else 0

    def solution_rows(self, golfer_id: int, hole: str, langs: Iterable[str]) -> int:
        """Non-failing rows (one per language and scoring) for a hole."""
        return self.db.query(Solution).filter(
            Solution.golfer_id == golfer_id,
            Solution.hole == hole,
            Solution.lang.in_(list(langs)),
            Solution.failing == False,  # noqa: E712
        ).count()

    def trophies(self, golfer_id: int) -> Set[str]:
        rows = self.db.query(Trophy.trophy).filter(Trophy.golfer_id == golfer_id).all()
        return {trophy for (trophy,) in rows}

    # ============ Helpers ============

    def _leaderboard(self, hole: str, lang: str, scoring: Scoring):
        return self.db.query(Solution).filter(
            Solution.hole == hole,
            Solution.lang == lang,
            Solution.scoring == scoring.value,
            Solution.failing == False,  # noqa: E712
        )

    def _snapshot(self, hole: str, lang: str, golfer_id: int, scoring: Scoring) -> RankSnapshot:
        """Rank is one more than the number of golfers with strictly fewer strokes."""
        mine = self._leaderboard(hole, lang, scoring).filter(
            Solution.golfer_id == golfer_id,
        ).first()
        if mine is None:
            return RankSnapshot()

        others = self._leaderboard(hole, lang, scoring).filter(Solution.golfer_id != golfer_id)
        ahead = others.filter(Solution.strokes < mine.strokes).count()
        level = others.filter(Solution.strokes == mine.strokes).count()

        return RankSnapshot(strokes=mine.strokes, rank=ahead + 1, joint=level > 0)

    def _save(self, code: str, hole: str, lang: str, golfer_id: int, scoring: Scoring) -> RankUpdate:
        before = self._snapshot(hole, lang, golfer_id, scoring)
        strokes = scoring.strokes(code)
        now = datetime.utcnow()

        row = self.db.query(Solution).filter(
            Solution.golfer_id == golfer_id,
            Solution.hole == hole,
            Solution.lang == lang,
            Solution.scoring == scoring.value,
        ).first()

        if row is None:
            self.db.add(Solution(
                golfer_id=golfer_id,
                hole=hole,
                lang=lang,
                scoring=scoring.value,
                code=code,
                strokes=strokes,
                failing=False,
                submitted=now,
            ))
        elif row.failing or strokes <= row.strokes:
            # A tie keeps the original submission time
            if row.failing or strokes < row.strokes:
                row.submitted = now
            row.code = code
            row.strokes = strokes
            row.failing = False

        self.db.flush()
        after = self._snapshot(hole, lang, golfer_id, scoring)

        return RankUpdate(
            scoring=scoring,
            from_=before,
            to=after,
            beat=self._beaten(hole, lang, golfer_id, scoring, before, after),
        )

    def _beaten(
        self,
        hole: str,
        lang: str,
        golfer_id: int,
        scoring: Scoring,
        before: RankSnapshot,
        after: RankSnapshot,
    ) -> Optional[int]:
        """Golfers who were level with or ahead of us and are now behind."""
        if before.strokes == after.strokes:
            return None

        query = self._leaderboard(hole, lang, scoring).filter(
            Solution.golfer_id != golfer_id,
            Solution.strokes > after.strokes,
        )
        if before.strokes is not None:
            query = query.filter(Solution.strokes <= before.strokes)

        return query.count()

    def _refresh_points(self, hole: str) -> None:
        """
        Recompute points totals for everyone with a solution to this hole.

        A hole is worth round(1000 * best / mine) to a golfer, where best is the
        fewest strokes anyone has in any language and mine is the golfer's own
        fewest in any language.
        """
        golfer_ids = [
            golfer_id for (golfer_id,) in self.db.query(Solution.golfer_id).filter(
                Solution.hole == hole,
            ).distinct()
        ]
        if not golfer_ids:
            return

        for scoring in Scoring:
            totals = {golfer_id: 0 for golfer_id in golfer_ids}
            mine = self.db.query(
                Solution.golfer_id, Solution.hole, func.min(Solution.strokes),
            ).filter(
                Solution.golfer_id.in_(golfer_ids),
                Solution.scoring == scoring.value,
                Solution.failing == False,  # noqa: E712
            ).group_by(Solution.golfer_id, Solution.hole).all()

            # Only the holes these golfers have solved
            holes = {solved_hole for _, solved_hole, _ in mine}
            best: Dict[str, int] = dict(
                self.db.query(Solution.hole, func.min(Solution.strokes)).filter(
                    Solution.hole.in_(list(holes)),
                    Solution.scoring == scoring.value,
                    Solution.failing == False,  # noqa: E712
                ).group_by(Solution.hole).all()
            )

            for golfer_id, solved_hole, strokes in mine:
                if strokes:
                    totals[golfer_id] += round(1000 * best[solved_hole] / strokes)

            for golfer_id, total in totals.items():
                row = self.db.get(Points, (golfer_id, scoring.value))
                if row is None:
                    self.db.add(Points(golfer_id=golfer_id, scoring=scoring.value, points=total))
                else:
                    row.points = total

        self.db.flush()

    def _earned_trophies(self, hole: str, golfer_id: int) -> Set[str]:
        earned = set()

        candidates = ["hello-world"]
        if hole in HOLE_TROPHIES:
            candidates.append(HOLE_TROPHIES[hole])

        holes_solved = self.db.query(func.count(func.distinct(Solution.hole))).filter(
            Solution.golfer_id == golfer_id,
            Solution.failing == False,  # noqa: E712
        ).scalar() or 0
        if holes_solved >= BAKERS_DOZEN:
            candidates.append("bakers-dozen")

        for trophy in candidates:
            if self._insert_trophy(golfer_id, trophy):
                earned.add(trophy)

        return earned

    def _insert_trophy(self, golfer_id: int, trophy: str) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING, without committing."""
        if not is_trophy(trophy):
            raise ValueError(f"Unknown trophy '{trophy}'")

        values = {"golfer_id": golfer_id, "trophy": trophy, "earned": datetime.utcnow()}
        dialect = self.db.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
            stmt = insert(Trophy).values(**values).on_conflict_do_nothing(
                index_elements=["golfer_id", "trophy"],
            )
            return self.db.execute(stmt).rowcount == 1

        try:
            with self.db.begin_nested():
                self.db.add(Trophy(**values))
        except IntegrityError:
            return False
        return True
