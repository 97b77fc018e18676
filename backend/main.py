# backend/main.py
import logging, sys
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import Settings, get_settings
from backend.renderer import JobRequest, render_video
from backend.schemas import GenerateVideoRequest, GenerateVideoResponse


def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # runs under `uvicorn backend.main:app` as well as `sketch-renderer`
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"Video generator service running on port {settings.port}")
    yield


app = FastAPI(title="Sketch Video Renderer", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# Jobs are not queued: every request launches its own browser. This only
# makes overlapping jobs visible in the logs.
active_jobs = {"count": 0}


@app.post("/generate-video", response_model=GenerateVideoResponse, response_model_exclude_none=True)
async def generate_video(body: GenerateVideoRequest, settings: Settings = Depends(get_settings)):
    active_jobs["count"] += 1
    if active_jobs["count"] > 1:
        logger.warning(f"{active_jobs['count']} render jobs running at once, each with its own browser")
    try:
        path = await render_video(JobRequest(body.songUrl, body.outputPath), settings)
        return GenerateVideoResponse(success=True, outputPath=str(path))
    except Exception as e:
        logger.error(f"Error generating video: {e}", exc_info=True)
        error = GenerateVideoResponse(success=False, error=str(e) or "Unknown error occurred")
        return JSONResponse(error.model_dump(exclude_none=True), status_code=500)
    finally:
        active_jobs["count"] -= 1


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
