"""
LLM service proxying chat questions to the Gemini generateContent API
"""
import logging
from typing import Any, Dict, Optional
import httpx

from ..config import PLACEHOLDER_GEMINI_API_KEY, settings

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """
You are "EduGuide AI", an intelligent educational assistant inside a Student Information System.

Your tasks:
- Guide students academically
- Explain concepts
- Answer college-related queries
- Help with career, placements, courses
- Provide structured suggestions
- Be friendly and supportive
"""


class LLMServiceError(Exception):
    """Raised when the upstream model call fails or returns an unusable payload"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class LLMNotConfiguredError(LLMServiceError):
    def __init__(self):
        super().__init__("Gemini API key is not configured", status_code=503)


class LLMService:
    """Service for Gemini chat completion"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.gemini_api_key
        self.base_url = settings.gemini_base_url.rstrip("/")
        self.model = settings.gemini_model

        # HTTP client with timeout
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.chat_timeout_seconds),
            headers={"Content-Type": "application/json"}
        )

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    def _build_payload(self, message: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": message}]
                }
            ],
            "systemInstruction": {
                "role": "system",
                "parts": [{"text": SYSTEM_INSTRUCTION}]
            }
        }

    @staticmethod
    def _extract_reply(response_data: Dict[str, Any]) -> str:
        try:
            return response_data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise LLMServiceError("No candidates in Gemini response")

    async def ask(self, message: str) -> str:
        """
        Send a user message to Gemini and return the model's reply

        Args:
            message: The user's question

        Returns:
            The reply text

        Raises:
            LLMNotConfiguredError: If no real API key is set
            LLMServiceError: On timeouts, transport errors or bad responses
        """
        if not self.api_key or self.api_key == PLACEHOLDER_GEMINI_API_KEY:
            raise LLMNotConfiguredError()

        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            logger.info(f"Sending chat request to Gemini model: {self.model}")
            response = await self.client.post(
                url,
                params={"key": self.api_key},
                json=self._build_payload(message)
            )
        except httpx.TimeoutException:
            logger.error("Gemini API request timed out")
            raise LLMServiceError("Gemini API request timed out", status_code=504)
        except httpx.RequestError as e:
            logger.error(f"Gemini API request failed: {e}")
            raise LLMServiceError(f"Gemini API request failed: {e}")

        if response.status_code != 200:
            logger.error(f"Gemini API error: {response.status_code} - {response.text}")
            raise LLMServiceError(f"Gemini API error: {response.status_code}")

        try:
            response_data = response.json()
        except ValueError:
            logger.error(f"Gemini API returned invalid JSON: {response.text[:200]}")
            raise LLMServiceError("Invalid JSON in Gemini response")

        return self._extract_reply(response_data)


_llm_service: Optional[LLMService] = None


def get_llm_service() -> LLMService:
    """FastAPI dependency returning a shared LLM service"""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service


async def close_llm_service():
    global _llm_service
    if _llm_service is not None:
        await _llm_service.close()
        _llm_service = None
