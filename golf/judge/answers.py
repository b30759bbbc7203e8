"""
Hole answers.

Each hole is run with a list of arguments and must print an expected answer.
Answers live in HOLES_DIR/<hole>.json as {"args": [...], "answer": "..."}.
A few holes are computed instead of stored.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import HOLES_DIR
from .base import JudgeFault


@dataclass
class HoleRun:
    args: List[str] = field(default_factory=list)
    answer: str = ""


def fizz_buzz() -> str:
    lines = []
    for i in range(1, 101):
        line = ("Fizz" if i % 3 == 0 else "") + ("Buzz" if i % 5 == 0 else "")
        lines.append(line or str(i))
    return "\n".join(lines)


class HoleAnswers:
    """Loads the arguments and expected answer for a hole."""
    
    def __init__(self, holes_dir: Optional[Path] = None):
        self.holes_dir = holes_dir or HOLES_DIR
    
    def get(self, hole: str, code: str) -> HoleRun:
        if hole == "quine":
            return HoleRun(answer=code)
        if hole == "fizz-buzz":
            return HoleRun(answer=fizz_buzz())
        
        path = self.holes_dir / f"{hole}.json"
        if not path.exists():
            raise JudgeFault(f"No answer available for hole '{hole}'")
        
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return HoleRun(args=[str(arg) for arg in data.get("args", [])], answer=data["answer"])
        except (ValueError, KeyError) as e:
            raise JudgeFault(f"Malformed answer file for hole '{hole}': {e}") from e
