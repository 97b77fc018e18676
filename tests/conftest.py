import base64
import os
import sys

import pytest

# Ensure repository root is on sys.path so 'backend' is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from backend.browser import BrowserSession, CAPABILITY_SCRIPT  # noqa: E402
from backend.config import Settings  # noqa: E402
from backend.extractor import EXTRACT_SCRIPT  # noqa: E402
from backend.poller import COMPLETION_SCRIPT  # noqa: E402


class FakePage:
    """Stands in for a Playwright page running the visualizer."""

    def __init__(self, finished_after=1, video=b"0123456789", goto_error=None,
                 poll_error=None, extract_error=None, screenshot_error=None):
        self.finished_after = finished_after  # None: never finishes
        self.video = video
        self.goto_error = goto_error
        self.poll_error = poll_error
        self.extract_error = extract_error
        self.screenshot_error = screenshot_error
        self.polls = 0
        self.visited = []
        self.goto_kwargs = {}
        self.screenshots = []
        self.close_calls = 0
        self.handlers = {}
        self.default_navigation_timeout = None

    def on(self, event, callback):
        self.handlers[event] = callback

    def set_default_navigation_timeout(self, timeout):
        self.default_navigation_timeout = timeout

    async def goto(self, url, **kwargs):
        self.visited.append(url)
        self.goto_kwargs = kwargs
        if self.goto_error:
            raise self.goto_error

    async def evaluate(self, script):
        if script == CAPABILITY_SCRIPT:
            return {
                "hasStartRecording": True,
                "hasIsSketchReady": True,
                "hasIsRecordingFinished": True,
                "hasGetRecordedVideo": self.video is not None,
            }
        if script == COMPLETION_SCRIPT:
            if self.poll_error:
                raise self.poll_error
            self.polls += 1
            return self.finished_after is not None and self.polls >= self.finished_after
        if script == EXTRACT_SCRIPT:
            if self.extract_error:
                raise self.extract_error
            if self.video is None:
                return None
            return {"size": len(self.video), "data": base64.b64encode(self.video).decode()}
        raise AssertionError(f"unexpected script: {script}")

    async def screenshot(self, path=None):
        if self.screenshot_error:
            raise self.screenshot_error
        self.screenshots.append(path)

    async def close(self):
        self.close_calls += 1


class FakeBrowser:
    def __init__(self, close_error=None):
        self.close_error = close_error
        self.close_calls = 0
        self.handlers = {}

    def on(self, event, callback):
        self.handlers[event] = callback

    def disconnect(self):
        self.handlers["disconnected"](self)

    async def close(self):
        self.close_calls += 1
        if self.close_error:
            raise self.close_error
        if "disconnected" in self.handlers:
            self.disconnect()


class FakePlaywright:
    def __init__(self):
        self.stop_calls = 0

    async def stop(self):
        self.stop_calls += 1


def make_session(page=None, browser=None):
    return BrowserSession(FakePlaywright(), browser or FakeBrowser(), page or FakePage())


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def settings(tmp_path):
    return Settings(
        visualizer_url="https://example.test/visualizer",
        recording_timeout=0.2,
        poll_interval=0.01,
        settle_delay=0,
        screenshot_path=str(tmp_path / "error-screenshot.png"),
    )
