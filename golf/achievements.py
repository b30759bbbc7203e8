"""
Trophies awarded after a solution has been saved.

Each rule is a predicate over the golfer's aggregate state, today's date (UTC)
and the judged result. Every rule is checked on every saved solution and grants
are insert-if-absent, so the outcome never depends on rule order or on how many
requests race to grant the same trophy.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Set

from .catalogue import LANGS
from .judge import JudgeResult
from .ranks import Scoring
from .store import LeaderboardStore

logger = logging.getLogger(__name__)

POINTS_THRESHOLD = 9000


@dataclass
class RuleContext:
    golfer_id: int
    hole: str
    lang: str
    today: date
    result: Optional[JudgeResult]
    store: LeaderboardStore


@dataclass(frozen=True)
class Rule:
    trophy: str
    applies: Callable[[RuleContext], bool]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


# ============ Predicates ============

def on_day(month: int, day: int, hole: Optional[str] = None) -> Callable[[RuleContext], bool]:
    """Today is month/day, optionally only when playing a specific hole."""
    def applies(ctx: RuleContext) -> bool:
        if hole is not None and ctx.hole != hole:
            return False
        return (ctx.today.month, ctx.today.day) == (month, day)
    return applies


def twelvetide(ctx: RuleContext) -> bool:
    """The twelve days of Christmas, 25 December to 5 January."""
    if ctx.hole != "12-days-of-christmas":
        return False
    month, day = ctx.today.month, ctx.today.day
    return (month == 12 and day >= 25) or (month == 1 and day <= 5)


def polyglot(ctx: RuleContext) -> bool:
    return ctx.store.langs_solved(ctx.golfer_id) >= len(LANGS)


def over_9000(ctx: RuleContext) -> bool:
    return any(
        ctx.store.points(ctx.golfer_id, scoring) > POINTS_THRESHOLD
        for scoring in Scoring
    )


def same_hole_in(*langs: str) -> Callable[[RuleContext], bool]:
    """The hole is solved in every one of langs, on both scorings."""
    def applies(ctx: RuleContext) -> bool:
        if ctx.lang not in langs:
            return False
        rows = ctx.store.solution_rows(ctx.golfer_id, ctx.hole, langs)
        return rows == len(langs) * len(Scoring)
    return applies


# TODO Use the golfer's timezone once golfer settings exist.
RULES: List[Rule] = [
    Rule("happy-birthday-code-golf", on_day(10, 2)),
    Rule("twelvetide", twelvetide),
    Rule("may-the-4ᵗʰ-be-with-you", on_day(5, 4, hole="star-wars-opening-crawl")),
    Rule("independence-day", on_day(7, 4, hole="united-states")),
    Rule("vampire-byte", on_day(10, 31, hole="vampire-numbers")),
    Rule("pi-day", on_day(3, 14, hole="π")),
    Rule("polyglot", polyglot),
    Rule("its-over-9000", over_9000),
    Rule("caffeinated", same_hole_in("java", "javascript")),
    Rule("tim-toady", same_hole_in("perl", "raku")),
]


class AchievementEngine:
    """Evaluates the rule table for a saved solution."""

    def __init__(
        self,
        store: LeaderboardStore,
        rules: Optional[List[Rule]] = None,
        clock: Callable[[], date] = utc_today,
    ):
        self.store = store
        self.rules = RULES if rules is None else rules
        self.clock = clock

    def evaluate(
        self,
        golfer_id: int,
        hole: str,
        lang: str,
        result: Optional[JudgeResult] = None,
    ) -> Set[str]:
        """Grant every trophy whose rule holds. Returns the ones newly granted."""
        ctx = RuleContext(
            golfer_id=golfer_id,
            hole=hole,
            lang=lang,
            today=self.clock(),
            result=result,
            store=self.store,
        )

        granted = set()
        for rule in self.rules:
            if rule.applies(ctx) and self.store.grant_trophy(golfer_id, rule.trophy):
                logger.info(f"Golfer {golfer_id} earned {rule.trophy}")
                granted.add(rule.trophy)

        return granted
