"""Playlist plan model, validation and sanitization"""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict

from errors import InvalidAIResponseError
from settings import AI_MAX_QUERIES, PLAN_DESCRIPTION_MAX_LENGTH, PLAN_NAME_MAX_LENGTH


class PlaylistPlan(BaseModel):
    """Name, description and ordered search queries for one playlist"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    queries: Tuple[str, ...]


def sanitize_plan(raw: Any, max_queries: int = AI_MAX_QUERIES) -> PlaylistPlan:
    """Validate a parsed reply and trim it to the plan limits

    Raises:
        InvalidAIResponseError: If name or queries are missing
    """
    if not isinstance(raw, dict):
        raise InvalidAIResponseError("invalid AI response: expected a JSON object")

    name = raw.get("name")
    queries = raw.get("queries")
    if not name or not str(name).strip() or not isinstance(queries, list):
        raise InvalidAIResponseError("invalid AI response: missing name/queries")

    description = raw.get("description") or ""
    cleaned = [str(q).strip() for q in queries if q is not None]
    cleaned = [q for q in cleaned if q]

    return PlaylistPlan(
        name=str(name).strip()[:PLAN_NAME_MAX_LENGTH],
        description=str(description).strip()[:PLAN_DESCRIPTION_MAX_LENGTH],
        queries=tuple(cleaned[:max_queries]),
    )
