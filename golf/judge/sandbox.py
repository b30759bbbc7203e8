"""
Subprocess judge for untrusted code.

Each language has a runner executable at JUDGE_RUNNERS_DIR/<lang> which reads
the code on stdin and runs it with the hole's arguments. The runner is
responsible for isolation (containers, namespaces); this module adds:

1. Resource limits - memory, CPU, file size, no core dumps
2. Clean environment - no inherited variables
3. Output limits - stdout/stderr truncated
4. Timeout enforcement - hard kill on timeout
5. Cancellation - the process is killed if the awaiting task is cancelled
"""

import asyncio
import contextlib
import logging
import resource
import sys
import time
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional

from ..config import (
    JUDGE_MAX_OUTPUT_BYTES,
    JUDGE_MEMORY_MB,
    JUDGE_RUNNERS_DIR,
    JUDGE_TIMEOUT_SECONDS,
)
from .answers import HoleAnswers
from .base import Judge, JudgeFault, JudgeResult

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024


def _set_resource_limits(memory_mb: int, cpu_seconds: int):
    """Set resource limits for the current process (Linux only)."""
    try:
        # Memory limit (in bytes)
        memory_bytes = memory_mb * 1024 * 1024
        resource.setrlimit(resource.RLIMIT_AS, (memory_bytes, memory_bytes))

        # CPU time limit
        resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))

        # Limit file size (no large files)
        resource.setrlimit(resource.RLIMIT_FSIZE, (0, 0))

        # Limit core dump (no core files)
        resource.setrlimit(resource.RLIMIT_CORE, (0, 0))

    except (ValueError, OSError) as e:
        # Resource limits may not be available on all systems
        print(f"Warning: Could not set resource limits: {e}", file=sys.stderr)


def normalize_output(output: str) -> str:
    """Strip trailing whitespace from each line and trailing blank lines."""
    lines = [line.rstrip() for line in output.replace("\r\n", "\n").split("\n")]
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


async def _read_limited(stream: asyncio.StreamReader, buffer: bytearray, limit: int):
    """Drain a stream, keeping at most limit bytes."""
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return
        room = limit - len(buffer)
        if room > 0:
            buffer.extend(chunk[:room])


async def _feed(stdin: asyncio.StreamWriter, data: bytes):
    try:
        stdin.write(data)
        await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("Runner exited before reading all of its input")
    finally:
        stdin.close()


def _kill(process: asyncio.subprocess.Process):
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


class SandboxJudge(Judge):
    """
    Runs solutions through per-language runner executables.

    Usage:
        judge = SandboxJudge()
        result = await judge.execute("fizz-buzz", "python", code)
    """

    def __init__(
        self,
        runners_dir: Path = JUDGE_RUNNERS_DIR,
        timeout_seconds: int = JUDGE_TIMEOUT_SECONDS,
        memory_mb: int = JUDGE_MEMORY_MB,
        max_output_bytes: int = JUDGE_MAX_OUTPUT_BYTES,
        answers: Optional[HoleAnswers] = None,
        runners: Optional[Dict[str, List[str]]] = None,
    ):
        self.runners_dir = Path(runners_dir)
        self.timeout_seconds = timeout_seconds
        self.memory_mb = memory_mb
        self.max_output_bytes = max_output_bytes
        self.answers = answers or HoleAnswers()
        self.runners = runners or {}

    def command(self, lang: str) -> List[str]:
        """The runner command for a language, without hole arguments."""
        if lang in self.runners:
            return list(self.runners[lang])

        runner = self.runners_dir / lang
        if not runner.exists():
            raise JudgeFault(f"No runner installed for language '{lang}'")
        return [str(runner)]

    async def execute(self, hole: str, lang: str, code: str) -> JudgeResult:
        start = time.perf_counter()

        try:
            run = self.answers.get(hole, code)
            process = await asyncio.create_subprocess_exec(
                *self.command(lang),
                *run.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={},
                preexec_fn=lambda: _set_resource_limits(self.memory_mb, self.timeout_seconds + 1),
            )
        except (JudgeFault, OSError) as e:
            logger.error(f"Judge fault for {hole}/{lang}: {e}")
            return JudgeResult(
                passed=False,
                stderr=f"Judge error: {e}".encode(),
                took=timedelta(seconds=time.perf_counter() - start),
            )

        stdout, stderr = bytearray(), bytearray()
        timed_out = False

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _feed(process.stdin, code.encode("utf-8")),
                    _read_limited(process.stdout, stdout, self.max_output_bytes),
                    _read_limited(process.stderr, stderr, self.max_output_bytes),
                    process.wait(),
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            timed_out = True
            stderr.extend(f"\nKilled for exceeding the {self.timeout_seconds}s timeout.".encode())
            _kill(process)
            await process.wait()
        finally:
            # Also reached when the request is cancelled
            _kill(process)

        took = timedelta(seconds=time.perf_counter() - start)
        output = normalize_output(stdout.decode("utf-8", errors="replace"))

        return JudgeResult(
            passed=not timed_out and output == normalize_output(run.answer),
            timed_out=timed_out,
            stdout=output.encode("utf-8"),
            stderr=bytes(stderr).lstrip(b"\n"),
            answer=run.answer,
            args=run.args,
            took=took,
        )
