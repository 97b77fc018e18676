# backend/storage.py
import asyncio, logging, time
from pathlib import Path
from typing import Optional

from backend.errors import PersistenceError

logger = logging.getLogger(__name__)

_last_stamp = 0


def _timestamp_ms() -> int:
    # wall clock can step backwards; generated names must not
    global _last_stamp
    _last_stamp = max(int(time.time() * 1000), _last_stamp)
    return _last_stamp


def resolve_output_path(
    output_path: Optional[str] = None,
    recordings_dir: str = "recordings",
    home: Optional[Path] = None,
) -> Path:
    """Work out where a recording goes.

    A caller-supplied path always lives under the home directory: a leading
    ``~`` is dropped as a literal prefix (no user expansion) and so are any
    leading slashes. Without one, a timestamped file in ``recordings_dir`` is
    used.
    """
    home = Path(home) if home is not None else Path.home()
    if output_path:
        relative = output_path[1:] if output_path.startswith("~") else output_path
        return home / relative.lstrip("/\\")
    return home / recordings_dir / f"output-{_timestamp_ms()}.mp4"


def _write(payload: bytes, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "wb") as f:
        f.write(payload)


async def persist(payload: bytes, destination: Path) -> Path:
    logger.info(f"Writing video to file: {destination}")
    try:
        await asyncio.to_thread(_write, payload, destination)
    except OSError as e:
        raise PersistenceError(f"Could not write video to {destination}: {e}") from e
    logger.info(f"Wrote {len(payload)} bytes to {destination}")
    return destination
