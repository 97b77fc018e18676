# backend/config.py
import os, sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

DEFAULT_VISUALIZER_URL = "https://dev.singmesong.com/visualizer"

# Chrome shipped with the OS; Playwright's bundled Chromium is used when absent
SYSTEM_CHROME = {
    "darwin": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "linux": "/usr/bin/google-chrome",
}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def default_executable_path() -> Optional[str]:
    path = SYSTEM_CHROME.get(sys.platform)
    if path and os.path.exists(path):
        return path
    return None


@dataclass(frozen=True)
class Settings:
    """Deployment-time knobs. All durations are in seconds."""
    visualizer_url: str = DEFAULT_VISUALIZER_URL
    executable_path: Optional[str] = None
    headless: bool = True
    launch_timeout: float = 120.0
    navigation_timeout: float = 60.0
    recording_timeout: float = 600.0
    poll_interval: float = 1.0
    settle_delay: float = 1.0
    recordings_dir: str = "recordings"
    screenshot_path: str = "error-screenshot.png"
    host: str = "0.0.0.0"
    port: int = 3003
    log_level: str = "INFO"

    def song_url(self, song_token: str) -> str:
        return f"{self.visualizer_url.rstrip('/')}/{song_token}"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            visualizer_url=os.getenv("VISUALIZER_BASE_URL", DEFAULT_VISUALIZER_URL),
            executable_path=os.getenv("CHROME_EXECUTABLE_PATH") or default_executable_path(),
            headless=_env_bool("HEADLESS", True),
            launch_timeout=_env_float("LAUNCH_TIMEOUT", 120.0),
            navigation_timeout=_env_float("NAVIGATION_TIMEOUT", 60.0),
            recording_timeout=_env_float("RECORDING_TIMEOUT", 600.0),
            poll_interval=_env_float("POLL_INTERVAL", 1.0),
            settle_delay=_env_float("SETTLE_DELAY", 1.0),
            recordings_dir=os.getenv("RECORDINGS_DIR", "recordings"),
            screenshot_path=os.getenv("ERROR_SCREENSHOT_PATH", "error-screenshot.png"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3003")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
