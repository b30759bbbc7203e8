"""Solution API endpoint."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..config import DISCONNECT_POLL_SECONDS
from ..db import Golfer
from ..judge import JudgeResult
from ..pipeline import ClientError, Submission, SubmissionPipeline
from .deps import current_golfer, get_pipeline
from .schemas import SolutionIn, SolutionOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["solutions"])

# nginx's "client closed request"
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    pass


async def judge_until_disconnect(
    request: Request,
    pipeline: SubmissionPipeline,
    submission: Submission,
) -> JudgeResult:
    """Run the judge, cancelling it if the client goes away first."""
    task = asyncio.create_task(pipeline.run_judge(submission))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.post("/solution", response_model=SolutionOut)
async def post_solution(
    body: SolutionIn,
    request: Request,
    golfer: Optional[Golfer] = Depends(current_golfer),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
):
    """
    Judge a solution and, if it passes for a logged-in golfer, save it.

    404 for an unknown hole or language, 413 for code of 128 KiB or more.
    """
    submission = Submission(code=body.code, hole=body.hole, lang=body.lang)

    try:
        hole, experimental = pipeline.validate(submission, golfer)
    except ClientError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    try:
        result = await judge_until_disconnect(request, pipeline, submission)
    except ClientDisconnected:
        logger.info(f"Client disconnected while judging {submission.hole}/{submission.lang}")
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    outcome = pipeline.settle(submission, golfer, hole, experimental, result)
    return SolutionOut.from_outcome(outcome)
