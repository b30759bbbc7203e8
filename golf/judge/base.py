"""Judge interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List


@dataclass(frozen=True)
class JudgeResult:
    """Result of running a solution against a hole."""
    passed: bool
    timed_out: bool = False
    stdout: bytes = b""
    stderr: bytes = b""
    answer: str = ""  # Expected output
    args: List[str] = field(default_factory=list)  # Arguments the code was run with
    took: timedelta = timedelta(0)


class JudgeFault(Exception):
    """The judge itself failed, as opposed to the submitted code."""
    pass


class Judge(ABC):
    """Runs submitted code for a hole in a language."""
    
    @abstractmethod
    async def execute(self, hole: str, lang: str, code: str) -> JudgeResult:
        """
        Run code and compare its output with the hole's answer.
        
        Must stop the running code if the awaiting task is cancelled and must
        enforce its own time limit, reporting it via JudgeResult.timed_out.
        """
        pass
