"""Runs one CLI voice session until the user interrupts it or it fails."""

from __future__ import annotations

import signal
import asyncio
import logging
import contextlib

from src.session.sinks import PlaybackSink
from src.session.context import SessionContext
from src.session.manager import SessionManager
from src.devices.types import CaptureDevice, PlaybackDevice
from src.realtime.bridge import UpstreamBridge
from src.errors import DeviceError, UpstreamConnectionError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class StopRequests:
    """Runs ``manager.stop()`` for each shutdown signal and keeps the task alive until it finishes."""

    def __init__(self, manager: SessionManager) -> None:
        self._manager = manager
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def request(self) -> None:
        task = asyncio.get_running_loop().create_task(self._manager.stop())
        self._tasks.add(task)
        task.add_done_callback(self._done)

    def _done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("stop after signal failed: %s", exc)

    async def wait(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, requests: StopRequests) -> list[signal.Signals]:
    installed: list[signal.Signals] = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, requests.request)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable off the main thread and on Windows.
            continue
        installed.append(sig)
    return installed


async def run_session(
    context: SessionContext,
    *,
    bridge: UpstreamBridge,
    capture: CaptureDevice,
    playback: PlaybackDevice,
) -> int:
    """Return the process exit code: 0 on a clean stop, 1 when the session failed."""
    manager = SessionManager(bridge, PlaybackSink(playback), capture=capture)
    loop = asyncio.get_running_loop()
    stop_requests = StopRequests(manager)
    installed = _install_signal_handlers(loop, stop_requests)
    try:
        try:
            await manager.start(context)
        except (UpstreamConnectionError, DeviceError) as exc:
            logger.error("could not start voice session: %s", exc)
            return EXIT_FAILURE

        logger.info("voice agent live (%s); press Ctrl+C to exit", context.agent_type)
        try:
            await manager.wait_closed()
        except asyncio.CancelledError:
            await manager.stop()
            raise
    finally:
        for sig in installed:
            with contextlib.suppress(Exception):
                loop.remove_signal_handler(sig)
        await stop_requests.wait()

    if manager.failure is not None:
        logger.error("voice session ended with an error: %s", manager.failure)
        return EXIT_FAILURE
    return EXIT_OK


__all__ = ["EXIT_FAILURE", "EXIT_OK", "StopRequests", "run_session"]
