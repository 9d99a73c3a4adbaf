"""
Pydantic request models for the dashboard service.
"""
from typing import Literal
from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    """Free-text description of the playlist to plan"""
    prompt: str = Field(..., min_length=1)


class GeneratePlaylistRequest(PromptRequest):
    public: bool = False


class ShuffleRequest(BaseModel):
    state: bool


class RepeatRequest(BaseModel):
    mode: Literal["off", "track", "context"]
