"""Shared fixtures."""

from datetime import timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from golf.db import Base, Golfer, make_engine
from golf.judge import Judge, JudgeResult
from golf.store import LeaderboardStore


class FakeJudge(Judge):
    """Returns a canned result and remembers what it was asked to run."""

    def __init__(self, result=None):
        self.result = result or JudgeResult(passed=True, answer="ok", stdout=b"ok")
        self.calls = []

    async def execute(self, hole, lang, code):
        self.calls.append((hole, lang, code))
        return self.result


class FakeAnnouncer:
    def __init__(self):
        self.published = []

    def publish(self, golfer_name, hole, lang, updates):
        self.published.append((golfer_name, hole.id, lang.id, list(updates)))
        return True


def passing(answer="ok", **kwargs):
    defaults = dict(passed=True, answer=answer, stdout=answer.encode(), took=timedelta(milliseconds=5))
    defaults.update(kwargs)
    return JudgeResult(**defaults)


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return LeaderboardStore(db)


@pytest.fixture
def make_golfer(db):
    def make(name):
        golfer = Golfer(name=name)
        db.add(golfer)
        db.commit()
        db.refresh(golfer)
        return golfer
    return make


@pytest.fixture
def alice(make_golfer):
    return make_golfer("alice")


@pytest.fixture
def bob(make_golfer):
    return make_golfer("bob")


@pytest.fixture
def judge():
    return FakeJudge()


@pytest.fixture
def announcer():
    return FakeAnnouncer()
