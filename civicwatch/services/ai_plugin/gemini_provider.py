"""
Gemini Providers - vision classification and photo similarity.

Both call the Gemini generateContent HTTP API with inline image data.
Failures raise ExternalServiceError subclasses; callers decide on fallback.
"""

import base64
import json
import logging
from typing import Dict, List, Optional

import requests
from pydantic import ValidationError

from civicwatch.core.exceptions import ClassifierError, SimilarityOracleError
from civicwatch.models.report import Classification
from civicwatch.services.ai_plugin.base import SimilarityOracle, SimilarityResult, VisionClassifier
from civicwatch.services.ai_plugin.categories import ISSUE_CATEGORIES, category_metadata
from civicwatch.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT_SECONDS = 15.0


def _strip_code_fences(text: str) -> str:
    """Gemini often wraps JSON in markdown code blocks."""
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if "```" in text:
        return text.split("```")[1].split("```")[0].strip()
    return text.strip()


class GeminiClient:
    """Thin HTTP client shared by the Gemini providers."""

    def __init__(self, api_key: Optional[str], model_name: str):
        self.api_key = api_key
        self.model_name = model_name

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def generate_json(self, parts: List[Dict], timeout: float) -> Dict:
        """
        Send prompt parts and parse the JSON answer.

        Raises:
            requests.RequestException: On transport errors and timeouts
            ValueError: On non-200 responses or unparseable answers
        """
        url = f"{API_BASE_URL}/{self.model_name}:generateContent"
        response = requests.post(
            url,
            params={"key": self.api_key},
            json={"contents": [{"parts": parts}]},
            timeout=timeout,
        )

        if response.status_code != 200:
            raise ValueError(f"Gemini API returned status {response.status_code}: {response.text[:200]}")

        try:
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Unexpected Gemini response shape: {e}") from e
        return json.loads(_strip_code_fences(text))

    @staticmethod
    def image_part(image_bytes: bytes, mime_type: str) -> Dict:
        return {
            "inline_data": {
                "mime_type": mime_type,
                "data": base64.b64encode(image_bytes).decode("ascii"),
            }
        }


class GeminiVisionClassifier(VisionClassifier):
    """
    Gemini vision classifier for civic issue photos.

    Disabled when no API key is given.
    """

    MODEL_VERSION = "1.0"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ):
        self.client = GeminiClient(api_key, model_name)
        self.timeout = timeout

        if self.client.configured:
            logger.info(f"✅ Gemini vision classifier initialized: {self.client.model_name}")
        else:
            logger.info("⚠️ Gemini vision classifier disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.client.configured

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.client.model_name, "version": self.MODEL_VERSION}

    def classify(self, image_bytes: bytes, description: str = "", mime_type: str = "image/jpeg") -> Classification:
        if not self.is_enabled():
            raise ClassifierError("Gemini API key not configured")

        try:
            analysis = self.client.generate_json(
                [{"text": self._build_prompt(description)}, self.client.image_part(image_bytes, mime_type)],
                timeout=self.timeout,
            )
            return self._to_classification(analysis)
        except (requests.RequestException, ValidationError, ValueError) as e:
            logger.warning(f"⚠️ Gemini classification failed: {e}")
            raise ClassifierError(str(e)) from e

    @staticmethod
    def _to_classification(analysis) -> Classification:
        if not isinstance(analysis, dict):
            raise ValueError(f"Expected a JSON object, got {type(analysis).__name__}")

        category = str(analysis.get("category") or "OTHER").upper()
        if category not in ISSUE_CATEGORIES:
            category = "OTHER"

        payload = dict(analysis)
        payload["category"] = category
        payload.update(category_metadata(category))
        payload["aiProcessed"] = True
        payload["processedAt"] = utc_now()
        return Classification.model_validate(payload)

    def _build_prompt(self, description: str) -> str:
        context = (
            f'User provided additional context: "{description}"'
            if description else "No additional context provided by user."
        )
        categories = "\n".join(
            f"- {name}: {info['description']}" for name, info in ISSUE_CATEGORIES.items()
        )
        return f"""You are an expert system for analyzing civic infrastructure issues.

Analyze this image FIRST and determine what civic issue is shown based PRIMARILY on
what you see. Use the user description only as supplementary context.

{context}

Available issue categories:
{categories}

Respond in JSON format:
{{
  "issueDetected": boolean,
  "category": "category_name",
  "confidence": number (0-100),
  "severity": "LOW|MEDIUM|HIGH",
  "technicalAssessment": "detailed description",
  "safetyConcerns": ["concern1", "concern2"],
  "recommendedActions": ["action1", "action2"],
  "estimatedUrgency": "IMMEDIATE|URGENT|MODERATE|LOW"
}}"""


class GeminiSimilarityOracle(SimilarityOracle):
    """
    Gemini-backed comparison of two civic issue photos.
    """

    PROMPT = """You compare two photos submitted by citizens reporting civic infrastructure issues.
Decide whether both photos show the SAME physical issue at the same place (for example the
same pothole or the same overflowing bin), not merely the same kind of issue.

Respond in JSON format:
{
  "similarityScore": number (0-100),
  "reasoning": "one or two sentences"
}"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_MODEL):
        self.client = GeminiClient(api_key, model_name)

    def is_enabled(self) -> bool:
        return self.client.configured

    def compare(self, image_a: bytes, image_b: bytes, timeout: float) -> SimilarityResult:
        if not self.is_enabled():
            raise SimilarityOracleError("Gemini API key not configured")

        try:
            answer = self.client.generate_json(
                [
                    {"text": self.PROMPT},
                    self.client.image_part(image_a, "image/jpeg"),
                    self.client.image_part(image_b, "image/jpeg"),
                ],
                timeout=timeout,
            )
            score = float(answer.get("similarityScore", 0))
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            raise SimilarityOracleError(str(e)) from e

        return SimilarityResult(
            similarity_score=score,
            reasoning=str(answer.get("reasoning", "")),
            model_name=self.client.model_name,
        )
