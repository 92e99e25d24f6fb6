"""
AI Plug-in Architecture.

Vision classification and photo similarity providers.
Classification falls back to keyword rules and never blocks ingestion.
"""

from civicwatch.services.ai_plugin.base import SimilarityOracle, SimilarityResult, VisionClassifier
from civicwatch.services.ai_plugin.gemini_provider import GeminiSimilarityOracle, GeminiVisionClassifier
from civicwatch.services.ai_plugin.mock_provider import RuleBasedClassifier, UnavailableSimilarityOracle
from civicwatch.services.ai_plugin.registry import (
    ClassifierRegistry,
    build_classifier_registry,
    build_similarity_oracle,
)

__all__ = [
    "VisionClassifier",
    "SimilarityOracle",
    "SimilarityResult",
    "GeminiVisionClassifier",
    "GeminiSimilarityOracle",
    "RuleBasedClassifier",
    "UnavailableSimilarityOracle",
    "ClassifierRegistry",
    "build_classifier_registry",
    "build_similarity_oracle",
]
