from backend.config import Settings


def test_defaults_match_service_contract(monkeypatch):
    for name in ("PORT", "LAUNCH_TIMEOUT", "NAVIGATION_TIMEOUT", "RECORDING_TIMEOUT",
                 "POLL_INTERVAL", "SETTLE_DELAY", "VISUALIZER_BASE_URL", "HEADLESS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.port == 3003
    assert settings.launch_timeout == 120
    assert settings.navigation_timeout == 60
    assert settings.recording_timeout == 600
    assert settings.poll_interval == 1
    assert settings.settle_delay == 1
    assert settings.headless is True
    assert settings.song_url("abc123") == "https://dev.singmesong.com/visualizer/abc123"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("RECORDING_TIMEOUT", "30")
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("VISUALIZER_BASE_URL", "http://localhost:5173/visualizer/")
    monkeypatch.setenv("CHROME_EXECUTABLE_PATH", "/opt/chrome/chrome")

    settings = Settings.from_env()

    assert settings.port == 8080
    assert settings.recording_timeout == 30
    assert settings.headless is False
    assert settings.executable_path == "/opt/chrome/chrome"
    assert settings.song_url("abc") == "http://localhost:5173/visualizer/abc"
