"""
Google Gemini provider implementation (generateContent endpoint).
"""
from typing import Dict, Any

from providers.base_provider import BaseProvider


class GeminiProvider(BaseProvider):
    """Provider implementation for the Gemini generateContent API"""

    def get_endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def get_params(self) -> Dict[str, str]:
        # Gemini takes the key as a query parameter
        return {"key": self.api_key}

    def build_request(self, instructions: str, prompt: str) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": instructions}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
