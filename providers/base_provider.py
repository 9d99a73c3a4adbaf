"""
Base provider interface for generative-text backends.
Defines the contract that all provider implementations must follow.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from errors import PlanGenerationError
from settings import CONNECT_TIMEOUT, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort message from an error response body"""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return f"HTTP {response.status_code}"


class BaseProvider(ABC):
    """Abstract base class for generative-text providers"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider with endpoint and credentials

        Args:
            base_url: The provider's base URL
            api_key: The API key for authentication
            model: Model identifier sent with each request
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.transport = transport

    @abstractmethod
    def build_request(self, instructions: str, prompt: str) -> Dict[str, Any]:
        """Build the provider-specific request body"""

    @abstractmethod
    def get_endpoint(self) -> str:
        """Full URL of the generation endpoint"""

    def get_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Accept": "application/json"}

    def get_params(self) -> Dict[str, str]:
        return {}

    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> str:
        """Pull the generated text out of the provider-specific response"""

    async def generate_text(self, instructions: str, prompt: str) -> str:
        """Send one instruction/prompt pair and return the generated text

        Raises:
            PlanGenerationError: On non-2xx responses or an empty reply
        """
        endpoint = self.get_endpoint()
        logger.debug(f"Requesting generation from {endpoint} with model {self.model}")

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
            transport=self.transport,
        ) as client:
            response = await client.post(
                endpoint,
                json=self.build_request(instructions, prompt),
                headers=self.get_headers(),
                params=self.get_params(),
            )

        logger.debug(f"Generation response status: {response.status_code}")
        if not response.is_success:
            message = extract_error_message(response)
            logger.error(f"Generation request failed {response.status_code}: {message}")
            raise PlanGenerationError(f"AI playlist generation failed: {message}")

        try:
            text = self.extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError):
            text = ""
        if not text:
            raise PlanGenerationError("AI playlist generation failed: empty response")
        return text
