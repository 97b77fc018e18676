# backend/schemas.py
from typing import Optional
from pydantic import BaseModel


class GenerateVideoRequest(BaseModel):
    """Body of POST /generate-video. Unknown keys such as ``compress`` are ignored."""
    songUrl: str
    outputPath: Optional[str] = None


class GenerateVideoResponse(BaseModel):
    success: bool
    outputPath: Optional[str] = None
    error: Optional[str] = None
