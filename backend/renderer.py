# backend/renderer.py
"""
Render job orchestration.

A job opens its own browser session, loads the visualizer page for a song,
waits for the page to finish recording, pulls the video out and writes it to
disk. Steps run strictly one after another. On failure a screenshot of the
page is attempted, the session is always closed exactly once, and the
original exception is raised to the caller unchanged.
"""
import asyncio, logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from backend.browser import BrowserSession, navigate, probe_capabilities
from backend.config import Settings
from backend.extractor import extract
from backend.poller import await_completion
from backend.storage import persist, resolve_output_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobRequest:
    song_token: str
    output_path: Optional[str] = None


async def render_video(
    job: JobRequest,
    settings: Settings,
    open_session: Callable[[Settings], Awaitable[BrowserSession]] = BrowserSession.open,
) -> Path:
    session = await open_session(settings)
    try:
        await navigate(session, settings.song_url(job.song_token), settings.navigation_timeout)
        logger.info("Page loaded, checking window properties...")
        await probe_capabilities(session)

        await await_completion(session, settings.recording_timeout, settings.poll_interval)
        logger.info("Recording finished, retrieving video data...")
        payload = await extract(session)
        # let the page finish with the blob before anything tears it down
        await asyncio.sleep(settings.settle_delay)

        destination = resolve_output_path(job.output_path, settings.recordings_dir)
        return await persist(payload, destination)
    except Exception as e:
        logger.error(f"Error during video generation: {e}")
        await session.screenshot(settings.screenshot_path)
        raise
    finally:
        await session.close()
