"""Streaming subprocess execution for the pipeline stages.

Runs one external command, feeding it optional stdin while reading stdout
and stderr concurrently line by line. Each line is handed to its callback as
soon as it is read so that long-running tools report progress while they
run; reading both streams at once keeps a chatty child from blocking on a
full pipe.

Philosophy:
- One child per call, all state local to the call
- Non-zero exit is an error carrying the captured stderr
- The child never outlives the call (any failure kills it)
"""

import asyncio
import logging
import os
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..exceptions import OperationTimeoutError, SubprocessError
from ..timeout_config import log_timeout_event

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]

# Manifests can carry long base64 lines; the asyncio default of 64 KiB is too small.
STREAM_LIMIT = 16 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


@dataclass
class ProcessResult:
    """Outcome of a successful run."""

    argv: List[str]
    returncode: int
    stdout: bytes
    stderr: str

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8")


async def _pump_lines(
    stream: asyncio.StreamReader,
    on_line: Optional[LineCallback],
    buffer: Optional[bytearray],
) -> None:
    while True:
        line = await stream.readline()
        if not line:
            break
        if buffer is not None:
            buffer.extend(line)
        if on_line is not None:
            on_line(line.decode("utf-8", errors="replace"))


async def _pump_chunks(stream: asyncio.StreamReader, buffer: bytearray) -> None:
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)


async def _feed_stdin(stream: asyncio.StreamWriter, data: bytes) -> None:
    # A tool may exit before reading all of its input; its exit status
    # reports the failure, so a closed pipe here is not an error of its own.
    try:
        stream.write(data)
        await stream.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("Child closed stdin before all input was written")
    finally:
        stream.close()
        with suppress(BrokenPipeError, ConnectionResetError):
            await stream.wait_closed()


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with suppress(ProcessLookupError):
            process.kill()
    await process.wait()


async def _abort(
    process: asyncio.subprocess.Process, pumps: List["asyncio.Future[None]"]
) -> None:
    await _kill(process)
    for pump in pumps:
        pump.cancel()
    await asyncio.gather(*pumps, return_exceptions=True)


async def run_streaming(
    argv: List[str],
    *,
    operation: str,
    stdin: Optional[bytes] = None,
    on_stdout: Optional[LineCallback] = None,
    on_stderr: Optional[LineCallback] = None,
    capture_stdout: bool = False,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """Run ``argv`` to completion, relaying its output as it is produced.

    Args:
        argv: Command and arguments
        operation: Short description used in logs and error messages
        stdin: Bytes written to the child's standard input, which is then closed
        on_stdout: Called with every stdout line
        on_stderr: Called with every stderr line
        capture_stdout: Keep stdout bytes in the result
        env: Extra environment variables for the child only
        timeout: Seconds before the child is killed

    Returns:
        ProcessResult of the finished child

    Raises:
        SubprocessError: If the executable is missing, exits non-zero or its
            output cannot be read
        OperationTimeoutError: If the timeout expires
        asyncio.CancelledError: If the caller is cancelled; the child is killed first
    """
    child_env = None
    if env:
        child_env = os.environ.copy()
        child_env.update(env)

    logger.debug(f"Running command: {' '.join(argv)}")
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=child_env,
            limit=STREAM_LIMIT,
        )
    except FileNotFoundError as e:
        raise SubprocessError(
            f"{operation}: executable '{argv[0]}' not found",
            command=argv,
            error_code="EXECUTABLE_NOT_FOUND",
            cause=e,
        ) from e
    except PermissionError as e:
        raise SubprocessError(
            f"{operation}: executable '{argv[0]}' is not runnable",
            command=argv,
            cause=e,
        ) from e

    stdout_buffer = bytearray()
    stderr_buffer = bytearray()
    assert process.stdout is not None and process.stderr is not None

    if capture_stdout and on_stdout is None:
        stdout_task = _pump_chunks(process.stdout, stdout_buffer)
    else:
        stdout_task = _pump_lines(
            process.stdout, on_stdout, stdout_buffer if capture_stdout else None
        )
    coros = [stdout_task, _pump_lines(process.stderr, on_stderr, stderr_buffer)]
    if stdin is not None:
        assert process.stdin is not None
        coros.append(_feed_stdin(process.stdin, stdin))
    pumps = [asyncio.ensure_future(coro) for coro in coros]

    async def _communicate() -> int:
        await asyncio.gather(*pumps)
        return await process.wait()

    try:
        returncode = await asyncio.wait_for(_communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        await _abort(process, pumps)
        log_timeout_event(operation, timeout, argv)
        raise OperationTimeoutError(
            f"{operation} timed out after {timeout} seconds",
            timeout_value=int(timeout) if timeout else None,
            command=argv,
            stderr=stderr_buffer.decode("utf-8", errors="replace"),
            cause=e,
        ) from e
    except asyncio.CancelledError:
        logger.info(f"{operation} cancelled, terminating child process")
        await asyncio.shield(_abort(process, pumps))
        raise
    except (ValueError, OSError) as e:
        # readline raises ValueError once a line outgrows STREAM_LIMIT
        logger.error(f"{operation}: reading tool output failed, terminating child process")
        await _abort(process, pumps)
        raise SubprocessError(
            f"{operation}: could not read tool output: {e}",
            command=argv,
            stderr=stderr_buffer.decode("utf-8", errors="replace"),
            error_code="OUTPUT_READ_FAILED",
            cause=e,
        ) from e
    except BaseException:
        await asyncio.shield(_abort(process, pumps))
        raise

    stderr_text = stderr_buffer.decode("utf-8", errors="replace")
    if returncode != 0:
        raise SubprocessError(
            f"{operation} failed",
            command=argv,
            returncode=returncode,
            stderr=stderr_text,
        )

    return ProcessResult(
        argv=list(argv),
        returncode=returncode,
        stdout=bytes(stdout_buffer),
        stderr=stderr_text,
    )


__all__ = ["LineCallback", "ProcessResult", "run_streaming"]
