"""Pipe transport for the Chrome DevTools Protocol (CDP).

Chrome started with ``--remote-debugging-pipe`` reads CDP messages on
fd 3 and writes them on fd 4, each message terminated by a NUL byte.
"""

from __future__ import annotations

import asyncio
import contextlib
import os

from .config import Config
from .logger import logger

# Largest single CDP message; evaluate replies carry whole page snapshots.
PIPE_READ_LIMIT: int = 2**26


class PipeWriter:
    """Minimal stream-writer facade over the write pipe transport."""

    def __init__(
        self,
        transport: asyncio.WriteTransport,
    ) -> None:
        self.transport = transport

    def write(self, data: bytes) -> None:
        self.transport.write(data)

    async def drain(self) -> None:
        # Pipe writes are buffered by the transport; just yield.
        await asyncio.sleep(0)

    def close(self) -> None:
        self.transport.close()


def _close_fds(*fds: int) -> None:
    for fd in fds:
        with contextlib.suppress(OSError):
            os.close(fd)


async def launch_chrome_with_pipe(
    config: Config,
) -> tuple[asyncio.subprocess.Process, asyncio.StreamReader, PipeWriter]:
    """Start Chrome and connect asyncio streams to its CDP pipe.

    Args:
        config: Launch configuration.

    Returns:
        tuple: The Chrome process, a reader for CDP messages from
        Chrome and a writer for CDP messages to Chrome.

    Raises:
        OSError: If the executable cannot be started.
    """
    argv = config.build_argv()
    env = config.build_env()

    # parent writes p2c_w -> child reads fd 3
    p2c_r, p2c_w = os.pipe()
    # child writes fd 4 -> parent reads c2p_r
    c2p_r, c2p_w = os.pipe()

    def _preexec() -> None:
        os.dup2(p2c_r, 3)
        os.dup2(c2p_w, 4)
        if p2c_r not in (3, 4):
            _close_fds(p2c_r)
        if c2p_w not in (3, 4):
            _close_fds(c2p_w)

    logger.debug("Chrome executable: %s", config.chrome_path)
    try:
        proc = await asyncio.create_subprocess_exec(
            config.chrome_path,
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,  # avoid pipe backpressure
            preexec_fn=_preexec,
            pass_fds=(3, 4),
            env=env,
        )
    except OSError:
        _close_fds(p2c_w, c2p_r)
        raise
    finally:
        # Child ends belong to Chrome now (or nobody, on failure).
        _close_fds(p2c_r, c2p_w)

    loop = asyncio.get_running_loop()

    reader = asyncio.StreamReader(limit=PIPE_READ_LIMIT)
    await loop.connect_read_pipe(
        lambda: asyncio.StreamReaderProtocol(reader),
        os.fdopen(c2p_r, "rb", buffering=0),
    )
    w_transport, _ = await loop.connect_write_pipe(
        asyncio.Protocol, os.fdopen(p2c_w, "wb", buffering=0)
    )

    logger.debug("Chrome started (pid=%s)", proc.pid)
    return proc, reader, PipeWriter(w_transport)


__all__ = ["launch_chrome_with_pipe", "PipeWriter", "PIPE_READ_LIMIT"]
