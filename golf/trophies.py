"""The closed trophy catalogue."""

from typing import Dict

TROPHIES: Dict[str, str] = {
    "bakers-dozen": "Baker's Dozen",
    "caffeinated": "Caffeinated",
    "happy-birthday-code-golf": "Happy Birthday, Code Golf",
    "hello-world": "Hello, World!",
    "independence-day": "Independence Day",
    "interview-ready": "Interview Ready",
    "its-over-9000": "It's Over 9,000!",
    "may-the-4ᵗʰ-be-with-you": "May the 4ᵗʰ Be with You",
    "ouroboros": "Ouroboros",
    "pi-day": "Pi Day",
    "polyglot": "Polyglot",
    "slowcoach": "Slowcoach",
    "tim-toady": "Tim Toady",
    "tl-dr": "tl;dr",
    "twelvetide": "Twelvetide",
    "vampire-byte": "Vampire Byte",
}


def is_trophy(trophy_id: str) -> bool:
    return trophy_id in TROPHIES
