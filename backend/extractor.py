# backend/extractor.py
import base64, logging
from playwright.async_api import Error as PlaywrightError

from backend.errors import ExtractionError, NoPayloadError

logger = logging.getLogger(__name__)

# Blobs can't cross into Python, so the page base64-encodes it in the same
# evaluation that fetches it. Chunked to stay under the argument limit of
# String.fromCharCode.
EXTRACT_SCRIPT = """async () => {
    console.log('Getting recorded video...');
    const blob = window.getRecordedVideo();
    if (!blob) {
        return null;
    }
    console.log('Video blob size:', blob.size);
    const bytes = new Uint8Array(await blob.arrayBuffer());
    let binary = '';
    for (let i = 0; i < bytes.length; i += 0x8000) {
        binary += String.fromCharCode.apply(null, bytes.subarray(i, i + 0x8000));
    }
    return { size: bytes.length, data: btoa(binary) };
}"""


async def extract(session) -> bytes:
    """Pull the finished recording out of the page as raw bytes."""
    try:
        result = await session.page.evaluate(EXTRACT_SCRIPT)
    except PlaywrightError as e:
        raise ExtractionError(f"Could not retrieve recorded video: {e}") from e

    if not result:
        raise NoPayloadError("No video data available")

    try:
        payload = base64.b64decode(result["data"], validate=True)
    except (KeyError, TypeError, ValueError) as e:
        raise ExtractionError(f"Recorded video came back malformed: {e}") from e

    if len(payload) != result.get("size"):
        raise ExtractionError(
            f"Recorded video size mismatch: page reported {result.get('size')} bytes, got {len(payload)}"
        )
    logger.info(f"Retrieved {len(payload)} bytes of video data")
    return payload
