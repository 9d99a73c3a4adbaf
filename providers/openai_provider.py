"""
OpenAI-compatible provider implementation.
Handles requests to OpenAI API format chat completions endpoints.
"""
from typing import Dict, Any

from providers.base_provider import BaseProvider


class OpenAIProvider(BaseProvider):
    """Provider implementation for OpenAI-compatible APIs"""

    def get_endpoint(self) -> str:
        """Build the chat completions endpoint URL"""
        if self.base_url.endswith('/chat/completions'):
            return self.base_url
        return f"{self.base_url}/chat/completions"

    def get_headers(self) -> Dict[str, str]:
        """Build request headers"""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_request(self, instructions: str, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"] or ""
