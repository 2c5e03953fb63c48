"""
Supervises the single proxy child process: spawn, output relaying, exit
reporting and termination.

The supervisor moves through IDLE -> LAUNCHING -> RUNNING -> IDLE. LAUNCHING
covers the download/provisioning phase before the spawn so that a second
launch request is refused during it as well.
"""

import asyncio
import codecs
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from bbmp_launcher.exceptions import AlreadyRunningError, SpawnError

log = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
DEFAULT_SHUTDOWN_GRACE = 3.0


class SupervisorState(Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    RUNNING = "running"


@dataclass
class ProcessSession:
    """The live child process and the task watching it."""

    process: asyncio.subprocess.Process
    argv: list[str]
    watcher: asyncio.Task | None = field(default=None, repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def running(self) -> bool:
        return self.process.returncode is None


class ProcessSupervisor:
    """
    Owns at most one ProcessSession.

    Output chunks from stdout and stderr go to ``on_log`` as text, unbuffered
    and in arrival order per stream. ``on_exit`` receives the exit code once per
    session, after the last output chunk.
    """

    def __init__(
        self,
        on_log: Callable[[str], None] | None = None,
        on_exit: Callable[[int], None] | None = None,
    ):
        self.on_log = on_log
        self.on_exit = on_exit
        self._state = SupervisorState.IDLE
        self._session: ProcessSession | None = None

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def session(self) -> ProcessSession | None:
        return self._session

    def is_running(self) -> bool:
        return self._session is not None

    def reserve(self) -> None:
        """
        Claims the session slot for a launch that is about to prepare its
        artifacts.

        Raises:
            AlreadyRunningError: If a session exists or another launch holds the slot.
        """
        if self._state is not SupervisorState.IDLE:
            raise AlreadyRunningError(
                "Already running" if self._session else "A launch is already in progress"
            )
        self._state = SupervisorState.LAUNCHING

    def release(self) -> None:
        """Gives the slot back after a launch failed before spawning."""
        if self._state is SupervisorState.LAUNCHING:
            self._state = SupervisorState.IDLE

    async def spawn(
        self,
        argv: list[str],
        cwd: Path | str,
        env: Mapping[str, str] | None = None,
    ) -> ProcessSession:
        """
        Starts the child process and begins relaying its output.

        Raises:
            AlreadyRunningError: If a session is already active.
            SpawnError: If the executable cannot be started.
        """
        if self._session is not None:
            raise AlreadyRunningError("Already running")

        self._state = SupervisorState.LAUNCHING
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
            )
        except OSError as e:
            self._state = SupervisorState.IDLE
            raise SpawnError(f"Could not start '{argv[0]}': {e}") from e

        session = ProcessSession(process=process, argv=list(argv))
        self._session = session
        self._state = SupervisorState.RUNNING
        session.watcher = asyncio.create_task(self._watch(session))
        log.debug(f"Started pid={process.pid}: {' '.join(argv)}")
        return session

    async def _pump(self, stream: asyncio.StreamReader | None) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            text = decoder.decode(chunk, final=not chunk)
            if text and self.on_log:
                self.on_log(text)
            if not chunk:
                break

    async def _watch(self, session: ProcessSession) -> None:
        process = session.process
        try:
            await asyncio.gather(self._pump(process.stdout), self._pump(process.stderr))
            code = await process.wait()
        finally:
            if self._session is session:
                self._session = None
                self._state = SupervisorState.IDLE

        log.debug(f"pid={process.pid} exited with code {code}")
        if self.on_exit:
            self.on_exit(code)

    def stop(self) -> bool:
        """
        Asks the running child to terminate and returns without waiting.
        The exit notification follows once the process has actually exited.

        Returns:
            True if a termination signal was sent, False if nothing was running.
        """
        session = self._session
        if session is None or not session.running:
            return False
        try:
            session.process.terminate()
            log.debug(f"Sent termination signal to pid={session.pid}")
        except ProcessLookupError:
            pass
        return True

    async def wait(self) -> int | None:
        """Waits for the current session to end and returns its exit code."""
        session = self._session
        if session is None or session.watcher is None:
            return None
        await asyncio.shield(session.watcher)
        return session.process.returncode

    async def shutdown(self, grace: float = DEFAULT_SHUTDOWN_GRACE) -> None:
        """Terminates the child, killing it if it outlives ``grace`` seconds."""
        session = self._session
        if session is None:
            return
        self.stop()
        try:
            await asyncio.wait_for(self.wait(), timeout=grace)
        except asyncio.TimeoutError:
            log.warning(f"pid={session.pid} ignored termination, killing it")
            try:
                session.process.kill()
            except ProcessLookupError:
                pass
            if session.watcher is not None:
                await asyncio.shield(session.watcher)
