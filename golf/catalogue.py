"""Hole and language registry."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Hole:
    """A single puzzle, judged on the output a solution prints."""
    id: str
    name: str
    category: str


@dataclass(frozen=True)
class Lang:
    """A language golfers may submit in."""
    id: str
    name: str


def _index(items) -> Dict[str, object]:
    return {item.id: item for item in items}


HOLES: Dict[str, Hole] = _index([
    Hole("12-days-of-christmas", "12 Days of Christmas", "Art"),
    Hole("99-bottles-of-beer", "99 Bottles of Beer", "Art"),
    Hole("arabic-to-roman", "Arabic to Roman", "Transform"),
    Hole("brainfuck", "Brainfuck", "Computing"),
    Hole("christmas-trees", "Christmas Trees", "Art"),
    Hole("diamonds", "Diamonds", "Art"),
    Hole("emirp-numbers", "Emirp Numbers", "Sequence"),
    Hole("evil-numbers", "Evil Numbers", "Sequence"),
    Hole("fibonacci", "Fibonacci", "Sequence"),
    Hole("fizz-buzz", "Fizz Buzz", "Sequence"),
    Hole("happy-numbers", "Happy Numbers", "Sequence"),
    Hole("leap-years", "Leap Years", "Sequence"),
    Hole("pascals-triangle", "Pascal's Triangle", "Sequence"),
    Hole("prime-numbers", "Prime Numbers", "Sequence"),
    Hole("quine", "Quine", "Computing"),
    Hole("seven-segment", "Seven Segment", "Transform"),
    Hole("star-wars-opening-crawl", "Star Wars Opening Crawl", "Transform"),
    Hole("united-states", "United States", "Transform"),
    Hole("vampire-numbers", "Vampire Numbers", "Sequence"),
    Hole("π", "π", "Mathematics"),
])

# Judged like any other hole but never ranked or eligible for trophies
EXPERIMENTAL_HOLES: Dict[str, Hole] = _index([
    Hole("levenshtein-distance", "Levenshtein Distance", "Computing"),
    Hole("morse-decoder", "Morse Decoder", "Transform"),
])

LANGS: Dict[str, Lang] = _index([
    Lang("bash", "Bash"),
    Lang("brainfuck", "Brainfuck"),
    Lang("c", "C"),
    Lang("c-sharp", "C#"),
    Lang("f-sharp", "F#"),
    Lang("fortran", "Fortran"),
    Lang("go", "Go"),
    Lang("haskell", "Haskell"),
    Lang("j", "J"),
    Lang("java", "Java"),
    Lang("javascript", "JavaScript"),
    Lang("julia", "Julia"),
    Lang("lisp", "Lisp"),
    Lang("lua", "Lua"),
    Lang("nim", "Nim"),
    Lang("perl", "Perl"),
    Lang("php", "PHP"),
    Lang("powershell", "PowerShell"),
    Lang("python", "Python"),
    Lang("raku", "Raku"),
    Lang("ruby", "Ruby"),
    Lang("rust", "Rust"),
    Lang("swift", "Swift"),
])

# Accepted without being catalogued, never ranked
BYPASS_LANG = "assembly"


def find_hole(hole_id: str):
    """Look up a hole, returning (hole, experimental) or (None, False)."""
    if hole_id in HOLES:
        return HOLES[hole_id], False
    if hole_id in EXPERIMENTAL_HOLES:
        return EXPERIMENTAL_HOLES[hole_id], True
    return None, False


def is_known_lang(lang_id: str) -> bool:
    return lang_id in LANGS or lang_id == BYPASS_LANG
