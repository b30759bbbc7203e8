"""Expected vs actual output diff shown under a failing solution."""

import difflib
from typing import List, Optional


def split_lines(text: Optional[str]) -> List[str]:
    """Split keeping line endings; the last piece always gets one too."""
    return [line + "\n" for line in (text or "").split("\n")]


def unified_diff(expected: Optional[str], actual: Optional[str], context: int = 3) -> str:
    return "".join(difflib.unified_diff(
        split_lines(expected),
        split_lines(actual),
        fromfile="Exp",
        tofile="Out",
        n=context,
    ))
