# backend/poller.py
import asyncio, logging, time
from enum import Enum
from typing import Awaitable, Callable

from backend.errors import RecordingTimeoutError, SessionLostError

logger = logging.getLogger(__name__)

# Optional call: a page without the hook simply never reports finished.
COMPLETION_SCRIPT = "() => window.isRecordingFinished?.()"


class PollState(str, Enum):
    WAITING = "waiting"
    FINISHED = "finished"
    TIMED_OUT = "timed_out"


class CompletionPoller:
    """Polls an async predicate at a fixed interval until it is truthy or time runs out.

    The predicate, clock and sleep are injectable so the loop can be driven
    without a browser. Any exception from the predicate means the page is
    gone and is raised as ``SessionLostError`` straight away.
    """

    def __init__(
        self,
        predicate: Callable[[], Awaitable[object]],
        timeout: float,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._predicate = predicate
        self.timeout = timeout
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self.state = PollState.WAITING
        self.polls = 0

    async def run(self) -> PollState:
        start = self._clock()
        while True:
            # a stalled round-trip may not run past the deadline plus one interval
            remaining = self.timeout - (self._clock() - start)
            if await self._check(max(remaining, 0) + self.interval):
                self.state = PollState.FINISHED
                logger.info(f"Recording finished after {self.polls} poll(s)")
                return self.state
            elapsed = self._clock() - start
            if elapsed >= self.timeout:
                self._time_out()
            await self._sleep(self.interval)

    async def _check(self, limit: float) -> bool:
        self.polls += 1
        try:
            return bool(await asyncio.wait_for(self._predicate(), limit))
        except asyncio.TimeoutError:
            logger.warning(f"Completion check did not answer within {limit:g}s")
            self._time_out()
        except Exception as e:
            raise SessionLostError(f"Lost the page while waiting for the recording: {e}") from e

    def _time_out(self):
        self.state = PollState.TIMED_OUT
        raise RecordingTimeoutError(
            f"Recording timeout exceeded ({self.timeout:g}s without a finished signal)"
        )


async def await_completion(session, timeout: float, interval: float) -> None:
    """Block until the page's ``isRecordingFinished`` hook returns true."""

    async def is_finished():
        return await session.page.evaluate(COMPLETION_SCRIPT)

    logger.info("Waiting for recording to finish...")
    await CompletionPoller(is_finished, timeout, interval).run()
