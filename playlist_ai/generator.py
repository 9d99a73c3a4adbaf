"""Playlist plan generation through a generative-text provider"""

import logging
from typing import Optional

import httpx

from errors import ConfigurationError, PlanGenerationError
from providers import BaseProvider, create_provider
from settings import (
    AI_API_KEY,
    AI_BASE_URL,
    AI_MAX_QUERIES,
    AI_MIN_QUERIES,
    AI_MODEL,
    AI_PROVIDER,
    AI_TEST_MODE,
)
from .json_extraction import extract_json
from .plan import PlaylistPlan, sanitize_plan

logger = logging.getLogger(__name__)

PLAN_INSTRUCTIONS = (
    "You create Spotify playlist plans. Reply with JSON only, no prose and no code fences, "
    "using exactly these keys: "
    '"name" (string, at most 80 characters), '
    '"description" (string, at most 300 characters), '
    '"queries" (array of at least {min_queries} strings). '
    'Each query is a song search term such as "Artist - Track" or "Track Artist". '
    "Do not repeat songs."
)

TEST_MODE_PLAN = PlaylistPlan(
    name="Test Mode Playlist",
    description="Canned plan returned because AI_TEST_MODE is enabled.",
    queries=(
        "Daft Punk - One More Time",
        "Queen - Bohemian Rhapsody",
        "The Beatles - Here Comes The Sun",
        "Michael Jackson - Billie Jean",
        "Nirvana - Smells Like Teen Spirit",
        "Fleetwood Mac - Dreams",
        "Radiohead - Karma Police",
        "Kendrick Lamar - HUMBLE.",
        "Adele - Rolling in the Deep",
        "Arctic Monkeys - Do I Wanna Know?",
        "David Bowie - Heroes",
        "Outkast - Hey Ya!",
        "Prince - Purple Rain",
        "The Strokes - Last Nite",
        "Beyonce - Crazy in Love",
        "Tame Impala - The Less I Know The Better",
        "Stevie Wonder - Superstition",
        "Coldplay - Yellow",
        "Amy Winehouse - Rehab",
        "Bob Marley - Three Little Birds",
        "The Killers - Mr. Brightside",
        "Dua Lipa - Levitating",
        "Oasis - Wonderwall",
        "Gorillaz - Feel Good Inc.",
        "Aretha Franklin - Respect",
    ),
)


class PlanGenerator:
    """Turns a free-text prompt into a PlaylistPlan"""

    def __init__(
        self,
        provider: Optional[BaseProvider] = None,
        provider_name: str = AI_PROVIDER,
        api_key: Optional[str] = AI_API_KEY,
        model: str = AI_MODEL,
        base_url: Optional[str] = AI_BASE_URL,
        test_mode: bool = AI_TEST_MODE,
        min_queries: int = AI_MIN_QUERIES,
        max_queries: int = AI_MAX_QUERIES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.test_mode = test_mode
        self.min_queries = min_queries
        self.max_queries = max_queries
        self.provider = provider
        if self.provider is None and not test_mode and api_key:
            self.provider = create_provider(provider_name, api_key, model, base_url, transport=transport)

    async def generate(self, prompt: str) -> PlaylistPlan:
        """Generate a plan for a prompt

        Raises:
            PlanGenerationError: Empty prompt or failed generation request
            ConfigurationError: No API key configured (outside test mode)
            InvalidAIResponseError: Reply not parseable into a plan
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise PlanGenerationError("Write a prompt describing the playlist")

        if self.test_mode:
            logger.warning("AI_TEST_MODE is enabled: returning the canned test plan, no AI call made")
            return TEST_MODE_PLAN

        if self.provider is None:
            raise ConfigurationError("AI_API_KEY is not configured; set it to generate playlists with AI")

        instructions = PLAN_INSTRUCTIONS.format(min_queries=self.min_queries)
        text = await self.provider.generate_text(instructions, f"Prompt: {prompt}")
        plan = sanitize_plan(extract_json(text), max_queries=self.max_queries)
        logger.info(f"Generated plan '{plan.name}' with {len(plan.queries)} queries")
        return plan
