"""Pseudo-terminal session driver for interactive provider CLIs.

The driven programs never say "ready" or "done" in a machine-readable way.
A session therefore just accumulates everything the program prints and
lets callers poll that buffer for known text with a bounded wait.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Callable, Iterable, Optional

import pexpect

from ..config import POLL_INTERVAL_MS, TERMINAL_COLS, TERMINAL_ROWS
from ..exceptions import ProviderUnavailableError
from .ansi import strip_ansi

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

READ_CHUNK_SIZE = 4096


class TerminalSession:
    """One pty-backed child process, owned for the duration of a single check."""

    def __init__(
        self,
        command: str,
        args: Optional[list[str]] = None,
        cols: int = TERMINAL_COLS,
        rows: int = TERMINAL_ROWS,
        poll_interval_ms: int = POLL_INTERVAL_MS,
    ):
        self._command = command
        self._args = list(args or [])
        self._cols = cols
        self._rows = rows
        self._poll_interval = poll_interval_ms / 1000
        self._child: Optional[pexpect.spawn] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._reader_fd: Optional[int] = None
        self._chunks: list[str] = []
        self._closed = False

    @property
    def command(self) -> str:
        return self._command

    @property
    def output(self) -> str:
        """Everything the program has printed so far, escape codes included."""
        return "".join(self._chunks)

    @property
    def text(self) -> str:
        return strip_ansi(self.output)

    @property
    def is_alive(self) -> bool:
        return self._child is not None and not self._closed and self._child.isalive()

    async def __aenter__(self) -> "TerminalSession":
        await self.start()
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def start(self) -> "TerminalSession":
        """Spawn the program on a pty of fixed geometry.

        The child inherits the caller's working directory and environment.
        """
        if self._child is not None:
            raise RuntimeError(f"Session for {self._command} was already started.")

        env = dict(os.environ)
        env.setdefault("TERM", "xterm-color")
        try:
            self._child = pexpect.spawn(
                self._command,
                self._args,
                dimensions=(self._rows, self._cols),
                cwd=os.getcwd(),
                env=env,
                encoding="utf-8",
                codec_errors="replace",
            )
        except pexpect.ExceptionPexpect as e:
            raise ProviderUnavailableError(f"Could not start {self._command}: {e}") from e

        self._loop = asyncio.get_running_loop()
        self._reader_fd = self._child.child_fd
        self._loop.add_reader(self._reader_fd, self._on_readable)
        logger.debug(f"Spawned {self._command} {' '.join(self._args)} (pid={self._child.pid})")
        return self

    def _on_readable(self) -> None:
        try:
            chunk = self._child.read_nonblocking(size=READ_CHUNK_SIZE, timeout=0)
        except pexpect.TIMEOUT:
            return
        except pexpect.EOF:
            logger.debug(f"{self._command} closed its terminal")
            self._detach_reader()
            return
        except OSError as e:
            logger.warning(f"Read from {self._command} failed: {e}")
            self._detach_reader()
            return
        if chunk:
            self._chunks.append(chunk)

    def _detach_reader(self) -> None:
        if self._loop is not None and self._reader_fd is not None:
            self._loop.remove_reader(self._reader_fd)
        self._reader_fd = None

    def send(self, data: str) -> None:
        """Write raw keystrokes, control characters included. Nothing is awaited."""
        if self._child is None or self._closed:
            raise RuntimeError(f"Session for {self._command} is not running.")
        try:
            self._child.send(data)
        except OSError as e:
            # The program may already have exited on its own during teardown.
            logger.debug(f"Write to {self._command} failed: {e}")

    async def wait_for(self, predicate: Callable[[str], bool], max_wait_ms: int) -> bool:
        """Poll the normalized buffer until ``predicate`` holds or time runs out.

        Returns False on timeout. Output arrives in fragments, so the check
        only runs once per poll interval rather than on every read.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait_ms / 1000
        while loop.time() < deadline:
            await asyncio.sleep(min(self._poll_interval, max(deadline - loop.time(), 0)))
            if predicate(self.text):
                return True
        return False

    async def wait_for_any(self, markers: Iterable[str], max_wait_ms: int) -> Optional[str]:
        """Wait for any of ``markers``; return the first one found, or None."""
        markers = list(markers)
        found: list[str] = []

        def _match(text: str) -> bool:
            for marker in markers:
                if marker in text:
                    found.append(marker)
                    return True
            return False

        if await self.wait_for(_match, max_wait_ms):
            return found[0]
        return None

    async def settle(self, ms: int) -> None:
        """Fixed delay for UI debounce. Not a completion signal."""
        await asyncio.sleep(ms / 1000)

    async def close(self) -> None:
        """Terminate the program. Safe to call twice or after the child died."""
        if self._closed:
            return
        self._closed = True
        self._detach_reader()
        if self._child is None:
            return
        try:
            await asyncio.to_thread(self._child.close, True)
        except pexpect.ExceptionPexpect as e:
            logger.warning(f"Could not terminate {self._command}: {e}")
        logger.debug(f"Closed {self._command} session ({len(self.output)} chars captured)")
