"""Tests for the sandbox judge."""

import asyncio
import json
import sys

import pytest

from golf.judge import HoleAnswers, JudgeFault, SandboxJudge
from golf.judge.answers import fizz_buzz
from golf.judge.sandbox import normalize_output


@pytest.fixture
def answers(tmp_path):
    (tmp_path / "arabic-to-roman.json").write_text(json.dumps({
        "args": ["1", "2", "3"],
        "answer": "I\nII\nIII",
    }))
    (tmp_path / "broken.json").write_text("{not json")
    return HoleAnswers(tmp_path)


@pytest.fixture
def judge(answers, tmp_path):
    return SandboxJudge(
        runners_dir=tmp_path / "runners",
        timeout_seconds=5,
        memory_mb=512,
        answers=answers,
        runners={"python": [sys.executable, "-"]},
    )


def run(judge, hole, code, lang="python"):
    return asyncio.run(judge.execute(hole, lang, code))


class TestSandboxJudge:
    """Test running solutions."""

    def test_fizz_buzz_passes(self, judge):
        code = """
for i in range(1, 101):
    print("Fizz" * (i % 3 == 0) + "Buzz" * (i % 5 == 0) or i)
"""
        result = run(judge, "fizz-buzz", code)
        assert result.passed
        assert not result.timed_out
        assert result.answer == fizz_buzz()
        assert result.took.total_seconds() > 0

    def test_wrong_output_fails(self, judge):
        result = run(judge, "fizz-buzz", "print(1)")
        assert not result.passed
        assert result.stdout == b"1"

    def test_trailing_whitespace_is_ignored(self, judge):
        code = 'print("I  \\nII\\nIII\\n\\n")'
        assert run(judge, "arabic-to-roman", code).passed

    def test_arguments_are_passed(self, judge):
        code = """
import sys
print("\\n".join("I" * int(arg) for arg in sys.argv[1:]))
"""
        result = run(judge, "arabic-to-roman", code)
        assert result.args == ["1", "2", "3"]
        assert result.passed

    def test_quine(self, judge):
        code = "s='s=%r;print(s%%s)';print(s%s)"
        result = run(judge, "quine", code)
        assert result.answer == code
        assert result.passed

    def test_stderr_is_captured(self, judge):
        code = """
import sys
print("oops", file=sys.stderr)
"""
        result = run(judge, "fizz-buzz", code)
        assert b"oops" in result.stderr

    def test_exception_fails(self, judge):
        result = run(judge, "fizz-buzz", "raise ValueError('intentional error')")
        assert not result.passed
        assert b"intentional error" in result.stderr

    def test_timeout_enforcement(self, answers, tmp_path):
        """Infinite loops are killed and reported as timed out."""
        judge = SandboxJudge(
            runners_dir=tmp_path,
            timeout_seconds=1,
            answers=answers,
            runners={"python": [sys.executable, "-"]},
        )
        result = run(judge, "fizz-buzz", "while True:\n    pass")
        assert result.timed_out
        assert not result.passed
        assert b"Killed for exceeding the 1s timeout." in result.stderr

    def test_output_is_truncated(self, answers, tmp_path):
        judge = SandboxJudge(
            runners_dir=tmp_path,
            max_output_bytes=100,
            answers=answers,
            runners={"python": [sys.executable, "-"]},
        )
        result = run(judge, "fizz-buzz", "print('x' * 10000)")
        assert len(result.stdout) == 100

    def test_cancellation(self, judge):
        """Cancelling the awaiting task stops judging."""
        async def cancel_midway():
            task = asyncio.create_task(judge.execute("fizz-buzz", "python", "import time\ntime.sleep(30)"))
            await asyncio.sleep(0.5)
            task.cancel()
            await task

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(cancel_midway())

    def test_missing_runner(self, judge):
        result = run(judge, "fizz-buzz", "print(1)", lang="rust")
        assert not result.passed
        assert b"No runner installed" in result.stderr

    def test_runner_from_directory(self, judge, tmp_path):
        runners = tmp_path / "runners"
        runners.mkdir()
        runner = runners / "bash"
        runner.write_text(f"#!/bin/sh\nexec {sys.executable} -\n")
        runner.chmod(0o755)

        assert judge.command("bash") == [str(runner)]
        assert run(judge, "arabic-to-roman", "print('I\\nII\\nIII')", lang="bash").passed

    def test_missing_answer(self, judge):
        result = run(judge, "united-states", "print(1)")
        assert not result.passed
        assert b"No answer available" in result.stderr


class TestHoleAnswers:

    def test_fizz_buzz(self):
        lines = fizz_buzz().split("\n")
        assert len(lines) == 100
        assert lines[:5] == ["1", "2", "Fizz", "4", "Buzz"]
        assert lines[14] == "FizzBuzz"

    def test_malformed_file(self, answers):
        with pytest.raises(JudgeFault):
            answers.get("broken", "")

    def test_missing_file(self, answers):
        with pytest.raises(JudgeFault):
            answers.get("π", "")


class TestNormalizeOutput:

    def test_strips_trailing_whitespace(self):
        assert normalize_output("a  \r\nb\t\n\n\n") == "a\nb"

    def test_keeps_leading_whitespace(self):
        assert normalize_output("  a\n b") == "  a\n b"
