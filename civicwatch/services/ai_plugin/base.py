"""
AI Provider Base Interfaces.

Defines the contracts for the vision classifier and the image
similarity oracle. The lifecycle core only consumes their structured
results; it never looks at pixels itself.
"""

from abc import ABC, abstractmethod
from typing import Dict

from civicwatch.models.report import Classification


class SimilarityResult:
    """
    Standardized similarity oracle response.

    similarity_score is on a 0-100 scale.
    """

    def __init__(self, similarity_score: float, reasoning: str = "", model_name: str = ""):
        self.similarity_score = max(0.0, min(100.0, float(similarity_score)))
        self.reasoning = reasoning
        self.model_name = model_name

    def to_dict(self) -> Dict:
        return {
            "similarity_score": self.similarity_score,
            "reasoning": self.reasoning,
            "model_name": self.model_name,
        }


class VisionClassifier(ABC):
    """
    Abstract base class for vision classifiers.

    Implementations raise ClassifierError on failure; the registry
    decides what to fall back to.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """
        Returns:
            Dict with 'name' and 'version' keys
        """
        pass

    @abstractmethod
    def classify(
        self,
        image_bytes: bytes,
        description: str = "",
        mime_type: str = "image/jpeg"
    ) -> Classification:
        """
        Classify a civic issue photo.

        Args:
            image_bytes: Raw image content
            description: Optional citizen description (supplementary context)
            mime_type: Image MIME type

        Returns:
            Classification

        Raises:
            ClassifierError: If the classifier could not produce a result
        """
        pass


class SimilarityOracle(ABC):
    """
    Abstract base class for image similarity oracles.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def compare(self, image_a: bytes, image_b: bytes, timeout: float) -> SimilarityResult:
        """
        Score how likely two photos show the same physical issue.

        Args:
            image_a: New report photo
            image_b: Candidate report photo
            timeout: Seconds the caller is willing to wait

        Returns:
            SimilarityResult with a 0-100 score and free-text reasoning

        Raises:
            SimilarityOracleError: If the comparison failed
        """
        pass
