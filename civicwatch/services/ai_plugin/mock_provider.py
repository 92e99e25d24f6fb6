"""
Fallback Providers - used when the Gemini providers are disabled or failing.

Rule-based classification from the citizen description, and a similarity
oracle that never claims a match. Both always succeed.
"""

import logging
from typing import Dict

from civicwatch.models.report import Classification
from civicwatch.services.ai_plugin.base import SimilarityOracle, SimilarityResult, VisionClassifier
from civicwatch.services.ai_plugin.categories import category_metadata
from civicwatch.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


# (keywords, category, severity), first match wins
KEYWORD_RULES = [
    (("pothole", "road", "crack"), "POTHOLE", "HIGH"),
    (("light", "lamp"), "STREET_LIGHT", "MEDIUM"),
    (("garbage", "trash", "waste"), "GARBAGE_OVERFLOW", "HIGH"),
    (("drain", "water", "flood"), "DRAIN_BLOCKAGE", "HIGH"),
    (("sidewalk", "pavement"), "BROKEN_SIDEWALK", "MEDIUM"),
]


class RuleBasedClassifier(VisionClassifier):
    """
    Keyword classifier over the citizen description.

    Confidence is deliberately low (60 with a description, 40 without)
    so operators can tell fallback results apart.
    """

    MODEL_NAME = "rules-v1"
    MODEL_VERSION = "1.0.0"

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def classify(self, image_bytes: bytes, description: str = "", mime_type: str = "image/jpeg") -> Classification:
        description = (description or "").strip()
        desc_lower = description.lower()

        category = "OTHER"
        severity = "MEDIUM"
        if description:
            for keywords, rule_category, rule_severity in KEYWORD_RULES:
                if any(word in desc_lower for word in keywords):
                    category, severity = rule_category, rule_severity
                    break
            assessment = f"Issue categorized based on description keywords: {description}"
        else:
            assessment = "Image submitted without description - manual review required for proper categorization"

        metadata = category_metadata(category)
        return Classification(
            category=category,
            severity=severity,
            confidence=60 if description else 40,
            estimated_urgency="URGENT" if severity == "HIGH" else "MODERATE",
            technical_assessment=assessment,
            safety_concerns=["Manual assessment required"],
            recommended_actions=["Verify issue on-site", "Assign appropriate department"],
            ai_processed=False,
            fallback_used=True,
            processed_at=utc_now(),
            **metadata,
        )


class UnavailableSimilarityOracle(SimilarityOracle):
    """
    Stand-in oracle when no similarity model is configured.

    Scores every pair 0, so every report becomes a new primary.
    """

    MODEL_NAME = "similarity-unavailable"

    def is_enabled(self) -> bool:
        return True

    def compare(self, image_a: bytes, image_b: bytes, timeout: float) -> SimilarityResult:
        return SimilarityResult(
            similarity_score=0.0,
            reasoning="Similarity oracle unavailable; treated as not similar",
            model_name=self.MODEL_NAME,
        )
