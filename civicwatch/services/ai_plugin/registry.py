"""
AI Provider Registry.

Selects classifier and similarity providers from configuration and
applies fallback logic for the classifier.
"""

import logging
from typing import List, Optional

from civicwatch.core.settings import Settings
from civicwatch.models.report import Classification
from civicwatch.services.ai_plugin.base import SimilarityOracle, VisionClassifier
from civicwatch.services.ai_plugin.gemini_provider import GeminiSimilarityOracle, GeminiVisionClassifier
from civicwatch.services.ai_plugin.mock_provider import RuleBasedClassifier, UnavailableSimilarityOracle

logger = logging.getLogger(__name__)


class ClassifierRegistry:
    """
    Ordered list of classifiers with fallback.

    Tries providers in priority order; the rule-based classifier is
    always last so classify_with_fallback never fails.
    """

    def __init__(self, providers: Optional[List[VisionClassifier]] = None):
        self.providers: List[VisionClassifier] = list(providers or [])
        if not any(isinstance(provider, RuleBasedClassifier) for provider in self.providers):
            self.providers.append(RuleBasedClassifier())

    def classify_with_fallback(
        self,
        image_bytes: bytes,
        description: str = "",
        mime_type: str = "image/jpeg"
    ) -> Classification:
        for provider in self.providers:
            if not provider.is_enabled():
                continue
            name = provider.get_model_info()["name"]
            try:
                classification = provider.classify(image_bytes, description, mime_type)
                logger.info(
                    f"✅ Classified with {name}: {classification.category}/{classification.severity} "
                    f"(confidence {classification.confidence})"
                )
                return classification
            except Exception as e:
                logger.warning(f"Classifier {name} failed: {e}")
                continue

        # Only reachable if the rule-based provider was removed after construction
        logger.error("⚠️ All classifiers failed, using rule-based defaults")
        return RuleBasedClassifier().classify(image_bytes, description, mime_type)


def build_classifier_registry(settings: Settings) -> ClassifierRegistry:
    if not settings.AI_ENABLED:
        logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using rule-based classifier only")
        return ClassifierRegistry()
    return ClassifierRegistry([
        GeminiVisionClassifier(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    ])


def build_similarity_oracle(settings: Settings) -> SimilarityOracle:
    if settings.AI_ENABLED:
        oracle = GeminiSimilarityOracle(api_key=settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL)
        if oracle.is_enabled():
            logger.info("✅ Gemini similarity oracle registered")
            return oracle
    logger.info("⚠️ No similarity oracle configured, duplicate detection will not merge reports")
    return UnavailableSimilarityOracle()
