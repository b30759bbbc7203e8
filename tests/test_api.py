"""Tests for the HTTP API."""

import asyncio
import uuid

import httpx
import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from conftest import FakeJudge, passing
from golf.api.deps import current_golfer, get_announcer, get_judge, get_pipeline
from golf.config import MAX_CODE_BYTES, SESSION_COOKIE
from golf.db import Base, Golfer, Session as GolferSession, Solution, get_db, make_engine
from golf.judge import JudgeResult
from golf.main import app
from golf.pipeline import SubmissionPipeline


@pytest.fixture
def client(db, judge, announcer):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_judge] = lambda: judge
    app.dependency_overrides[get_announcer] = lambda: announcer

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


@pytest.fixture
def login(db):
    def login(golfer):
        session_id = str(uuid.uuid4())
        db.add(GolferSession(id=session_id, golfer_id=golfer.id))
        db.commit()
        return {"Cookie": f"{SESSION_COOKIE}={session_id}"}
    return login


def body(code="print(1)", hole="fizz-buzz", lang="python"):
    return {"Code": code, "Hole": hole, "Lang": lang}


class TestSolution:

    def test_anonymous_pass(self, client, judge):
        response = client.post("/solution", json=body())
        assert response.status_code == 200

        data = response.json()
        assert data["Pass"] is True
        assert data["LoggedIn"] is False
        assert data["Exp"] == "ok"
        assert data["Out"] == "ok"
        assert data["Diff"] == ""
        assert data["Argv"] == []
        assert data["Trophies"] == []
        assert [u["Scoring"] for u in data["RankUpdates"]] == ["bytes", "chars"]
        assert data["RankUpdates"][0]["From"] == {"Strokes": None, "Rank": None, "Joint": None}
        assert judge.calls == [("fizz-buzz", "python", "print(1)")]

    def test_logged_in_pass_is_ranked(self, client, login, alice, db):
        response = client.post("/solution", json=body(), headers=login(alice))
        data = response.json()

        assert data["LoggedIn"] is True
        assert data["RankUpdates"][0]["To"] == {"Strokes": 8, "Rank": 1, "Joint": False}
        assert data["RankUpdates"][0]["Beat"] == 0
        assert "hello-world" in data["Trophies"]
        assert db.query(Solution).filter_by(golfer_id=alice.id).count() == 2

    def test_unknown_session_is_anonymous(self, client):
        response = client.post("/solution", json=body(), headers={"Cookie": f"{SESSION_COOKIE}=nope"})
        assert response.json()["LoggedIn"] is False

    def test_took_is_nanoseconds(self, client, judge):
        judge.result = passing()
        response = client.post("/solution", json=body())
        assert response.json()["Took"] == 5_000_000

    def test_markup_is_not_escaped(self, client, judge):
        """Text fields carry literal HTML, unescaped by the JSON encoder."""
        judge.result = JudgeResult(passed=False, answer="<b>hi</b>", stdout=b"<i>hi</i>")
        response = client.post("/solution", json=body())

        assert '"Exp":"<b>hi</b>"' in response.text
        assert "-<b>hi</b>" in response.json()["Diff"]
        assert "\\u003c" not in response.text

    def test_unknown_hole(self, client, judge):
        response = client.post("/solution", json=body(hole="nope"))
        assert response.status_code == 404
        assert judge.calls == []

    def test_unknown_lang(self, client, judge):
        response = client.post("/solution", json=body(lang="cobol"))
        assert response.status_code == 404
        assert judge.calls == []

    def test_bypass_lang_is_accepted(self, client, judge):
        response = client.post("/solution", json=body(lang="assembly"))
        assert response.status_code == 200
        assert len(judge.calls) == 1

    def test_code_too_large(self, client, judge, login, alice, store):
        response = client.post(
            "/solution",
            json=body(code="x" * MAX_CODE_BYTES),
            headers=login(alice),
        )
        assert response.status_code == 413
        assert judge.calls == []
        assert store.trophies(alice.id) == {"tl-dr"}

    def test_malformed_body(self, client, judge):
        response = client.post("/solution", json={"Code": "x"})
        assert response.status_code == 422
        assert judge.calls == []

    def test_store_failure_is_a_server_error(self, client, store, login, alice, announcer, monkeypatch):
        def broken(*args):
            raise RuntimeError("database is locked")
        monkeypatch.setattr(store, "record_pass", broken)
        pipeline = SubmissionPipeline(store, FakeJudge(passing()), announcer)
        app.dependency_overrides[get_pipeline] = lambda: pipeline

        response = client.post("/solution", json=body(), headers=login(alice))

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"

    def test_current_golfer_can_be_overridden(self, client, alice):
        app.dependency_overrides[current_golfer] = lambda: alice
        response = client.post("/solution", json=body())
        assert response.json()["LoggedIn"] is True


class TestCurrentGolfer:

    def test_lookup_ends_its_transaction(self, db, alice, login):
        cookie = login(alice)["Cookie"]
        request = Request({"type": "http", "headers": [(b"cookie", cookie.encode())]})

        golfer = current_golfer(request, db)

        assert golfer.id == alice.id
        assert golfer.name == "alice"
        assert not db.in_transaction()

    def test_no_cookie(self, db):
        assert current_golfer(Request({"type": "http", "headers": []}), db) is None


class SlowJudge(FakeJudge):
    def __init__(self, result, seconds):
        super().__init__(result)
        self.seconds = seconds

    async def execute(self, hole, lang, code):
        await asyncio.sleep(self.seconds)
        return await super().execute(hole, lang, code)


class TestConcurrentSubmissions:
    """Logged-in golfers are judged side by side on a file database."""

    @pytest.fixture
    def session_factory(self, tmp_path):
        # A busy timeout shorter than judging turns a lock held while judging into an error
        engine = make_engine(f"sqlite:///{tmp_path / 'golf.db'}", connect_args={"timeout": 1})
        Base.metadata.create_all(bind=engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
        engine.dispose()

    @pytest.fixture
    def cookies(self, session_factory):
        headers = []
        with session_factory() as db:
            for name in ("alice", "bob"):
                golfer = Golfer(name=name)
                db.add(golfer)
                db.flush()
                session_id = str(uuid.uuid4())
                db.add(GolferSession(id=session_id, golfer_id=golfer.id))
                headers.append({"Cookie": f"{SESSION_COOKIE}={session_id}"})
            db.commit()
        return headers

    def test_overlapping_submissions(self, session_factory, cookies, announcer):
        def override_get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        judge = SlowJudge(passing(), seconds=2)
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_judge] = lambda: judge
        app.dependency_overrides[get_announcer] = lambda: announcer

        async def submit_both():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                return await asyncio.gather(*(
                    client.post("/solution", json=body(), headers=headers) for headers in cookies
                ))

        try:
            responses = asyncio.run(submit_both())
        finally:
            app.dependency_overrides.clear()

        assert [r.status_code for r in responses] == [200, 200]

        # Whichever saved second sees the first and ties with it
        joints = sorted(r.json()["RankUpdates"][0]["To"]["Joint"] for r in responses)
        assert joints == [False, True]

        with session_factory() as db:
            assert db.query(Solution).count() == 4


class TestCatalogue:

    def test_holes(self, client):
        holes = {h["id"]: h for h in client.get("/holes").json()}
        assert holes["fizz-buzz"]["experimental"] is False
        assert holes["morse-decoder"]["experimental"] is True

    def test_langs(self, client):
        langs = [lang["id"] for lang in client.get("/langs").json()]
        assert "python" in langs
        assert "assembly" not in langs


class TestRoot:

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Code Golf"
