"""Shared API dependencies."""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..announce import RecordAnnouncer
from ..config import SESSION_COOKIE
from ..db import get_db, Golfer, Session as GolferSession
from ..judge import Judge, SandboxJudge
from ..pipeline import SubmissionPipeline
from ..store import LeaderboardStore

# Process-wide collaborators, started and stopped with the app
judge = SandboxJudge()
announcer = RecordAnnouncer()


def get_judge() -> Judge:
    return judge


def get_announcer() -> RecordAnnouncer:
    return announcer


def current_golfer(request: Request, db: Session = Depends(get_db)) -> Optional[Golfer]:
    """The golfer owning the session cookie, or None for anonymous requests."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        return None

    golfer = db.query(Golfer).join(GolferSession).filter(GolferSession.id == session_id).first()
    if golfer is not None:
        db.expunge(golfer)

    # Every transaction holds the SQLite write lock, and judging takes seconds
    db.rollback()
    return golfer


def get_pipeline(
    db: Session = Depends(get_db),
    judge: Judge = Depends(get_judge),
    announcer: RecordAnnouncer = Depends(get_announcer),
) -> SubmissionPipeline:
    return SubmissionPipeline(LeaderboardStore(db), judge, announcer)
