"""Hole and language listing endpoints."""

from fastapi import APIRouter

from ..catalogue import EXPERIMENTAL_HOLES, HOLES, LANGS
from .schemas import HoleInfo, LangInfo

router = APIRouter(tags=["catalogue"])


@router.get("/holes", response_model=list[HoleInfo])
async def list_holes():
    """List every hole, experimental ones last."""
    holes = [HoleInfo(id=h.id, name=h.name, category=h.category) for h in HOLES.values()]
    holes += [
        HoleInfo(id=h.id, name=h.name, category=h.category, experimental=True)
        for h in EXPERIMENTAL_HOLES.values()
    ]
    return holes


@router.get("/langs", response_model=list[LangInfo])
async def list_langs():
    return [LangInfo(id=lang.id, name=lang.name) for lang in LANGS.values()]
