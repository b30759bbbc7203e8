"""
Submission pipeline: validate, judge, respond, and for ranked passes save the
solution, log rank changes, award trophies and announce records.

The HTTP layer drives the three stages separately so it can cancel judging
when the client goes away; other callers can use submit().
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional, Set, Tuple

from ansi2html import Ansi2HTMLConverter

from . import ranks
from .achievements import AchievementEngine, Rule, utc_today
from .announce import RecordAnnouncer
from .catalogue import BYPASS_LANG, LANGS, Hole, find_hole, is_known_lang
from .config import MAX_CODE_BYTES
from .db.models import Golfer
from .diff import unified_diff
from .judge import Judge, JudgeResult
from .ranks import RankUpdate, Scoring
from .store import LeaderboardStore

logger = logging.getLogger(__name__)

LONE_SURROGATE = re.compile("[\ud800-\udfff]")


# ============ Client errors ============

class ClientError(Exception):
    """A rejected submission. Expected control flow, not a fault."""
    status_code = 400


class HoleNotFound(ClientError):
    status_code = 404


class LangNotFound(ClientError):
    status_code = 404


class CodeTooLarge(ClientError):
    status_code = 413


# ============ Data ============

@dataclass
class Submission:
    code: str
    hole: str
    lang: str

    def __post_init__(self):
        # JSON can carry unpaired surrogates, which have no UTF-8 encoding
        self.code = LONE_SURROGATE.sub("\ufffd", self.code)


@dataclass
class Outcome:
    """Everything the golfer is shown about a judged submission."""
    argv: List[str]
    diff: str
    err: str
    exp: str
    out: str
    passed: bool
    logged_in: bool
    took: timedelta
    rank_updates: List[RankUpdate] = field(default_factory=lambda: [
        RankUpdate(scoring=Scoring.BYTES),
        RankUpdate(scoring=Scoring.CHARS),
    ])
    trophies: List[str] = field(default_factory=list)


def render_stderr(stderr: bytes) -> str:
    """Terminal output to HTML; control codes become inline-styled spans."""
    text = stderr.decode("utf-8", errors="replace")
    if not text:
        return ""
    return Ansi2HTMLConverter(inline=True).convert(text, full=False)


class SubmissionPipeline:
    """Runs one submission from validation to response."""

    def __init__(
        self,
        store: LeaderboardStore,
        judge: Judge,
        announcer: RecordAnnouncer,
        clock: Callable[[], date] = utc_today,
        rules: Optional[List[Rule]] = None,
    ):
        self.store = store
        self.judge = judge
        self.announcer = announcer
        self.achievements = AchievementEngine(store, rules=rules, clock=clock)

    async def submit(self, submission: Submission, golfer: Optional[Golfer] = None) -> Outcome:
        hole, experimental = self.validate(submission, golfer)
        result = await self.run_judge(submission)
        return self.settle(submission, golfer, hole, experimental, result)

    def validate(self, submission: Submission, golfer: Optional[Golfer]) -> Tuple[Hole, bool]:
        """Returns (hole, experimental) or raises a ClientError."""
        hole, experimental = find_hole(submission.hole)
        if hole is None:
            raise HoleNotFound(f"Hole '{submission.hole}' not found")

        if not is_known_lang(submission.lang):
            raise LangNotFound(f"Language '{submission.lang}' not found")

        size = len(submission.code.encode("utf-8"))
        if size >= MAX_CODE_BYTES:
            if golfer is not None:
                self.store.grant_trophy(golfer.id, "tl-dr")
            raise CodeTooLarge(f"Code too large ({size} bytes, limit is under {MAX_CODE_BYTES})")

        return hole, experimental

    async def run_judge(self, submission: Submission) -> JudgeResult:
        return await self.judge.execute(submission.hole, submission.lang, submission.code)

    def settle(
        self,
        submission: Submission,
        golfer: Optional[Golfer],
        hole: Hole,
        experimental: bool,
        result: JudgeResult,
    ) -> Outcome:
        trophies: Set[str] = set()

        if result.timed_out and golfer is not None:
            if self.store.grant_trophy(golfer.id, "slowcoach"):
                trophies.add("slowcoach")

        out = result.stdout.decode("utf-8", errors="replace")
        outcome = Outcome(
            argv=list(result.args),
            diff=unified_diff(result.answer, out),
            err=render_stderr(result.stderr),
            exp=result.answer,
            out=out,
            passed=result.passed,
            logged_in=golfer is not None,
            took=result.took,
        )

        ranked = not experimental and submission.lang != BYPASS_LANG
        if result.passed and golfer is not None and ranked:
            trophies |= self._record(submission, golfer, hole, result, outcome)

        outcome.trophies = sorted(trophies)
        return outcome

    def _record(
        self,
        submission: Submission,
        golfer: Golfer,
        hole: Hole,
        result: JudgeResult,
        outcome: Outcome,
    ) -> Set[str]:
        recorded = self.store.record_pass(submission.code, hole.id, submission.lang, golfer.id)
        outcome.rank_updates = recorded.updates

        records = ranks.interpret(golfer.name, hole.id, submission.lang, recorded.updates)
        if records:
            self.announcer.publish(golfer.name, hole, LANGS[submission.lang], records)

        earned = self.achievements.evaluate(golfer.id, hole.id, submission.lang, result)
        self.store.release()
        return set(recorded.trophies) | earned
