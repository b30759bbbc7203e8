"""Judging submitted code against holes."""

from .base import Judge, JudgeFault, JudgeResult
from .answers import HoleAnswers, HoleRun
from .sandbox import SandboxJudge

__all__ = ["Judge", "JudgeFault", "JudgeResult", "HoleAnswers", "HoleRun", "SandboxJudge"]
