"""
Duplicate Detection - decides whether a new report repeats an existing one.

DESIGN PRINCIPLES:
- Candidates come from a proximity query (nearest first)
- First candidate scoring at or above the threshold wins; scanning stops
- One unreadable photo or failed comparison never aborts the scan
- A failed comparison never produces a duplicate
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import List, Optional, Tuple

from civicwatch.core.exceptions import PhotoStorageError, SimilarityOracleError
from civicwatch.models.report import DuplicateMatch, Report
from civicwatch.services.ai_plugin.base import SimilarityOracle, SimilarityResult
from civicwatch.services.photo_store import LocalPhotoStore

logger = logging.getLogger(__name__)


class SimilarityResolver:
    """
    Scans nearby reports and asks the similarity oracle about each one.
    """

    DEFAULT_SIMILARITY_THRESHOLD = 80.0
    DEFAULT_TIMEOUT_SECONDS = 10.0

    def __init__(
        self,
        oracle: SimilarityOracle,
        photo_store: LocalPhotoStore,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ):
        self.oracle = oracle
        self.photo_store = photo_store
        self.threshold = threshold
        self.timeout_seconds = timeout_seconds

    def resolve(
        self,
        photo: bytes,
        candidates: List[Tuple[Report, float]],
        timeout: Optional[float] = None
    ) -> Optional[DuplicateMatch]:
        """
        Find the first candidate the new photo duplicates.

        Args:
            photo: New report's photo content
            candidates: (report, distance_meters) pairs in proximity-query order
            timeout: Per-comparison timeout in seconds (defaults to timeout_seconds)

        Returns:
            DuplicateMatch for the first candidate at or above threshold, else None
        """
        timeout = timeout if timeout is not None else self.timeout_seconds

        for candidate, distance in candidates:
            try:
                candidate_photo = self.photo_store.read(candidate.photo_path)
            except PhotoStorageError as e:
                logger.warning(f"Skipping candidate {candidate.id}: {e}")
                continue

            try:
                result = self._compare(photo, candidate_photo, timeout)
            except SimilarityOracleError as e:
                logger.warning(f"Similarity check against {candidate.id} failed: {e}")
                continue

            logger.debug(
                f"Candidate {candidate.id} at {distance:.1f}m scored {result.similarity_score:.0f}"
            )
            if result.similarity_score >= self.threshold:
                logger.info(
                    f"Duplicate detected: matches report {candidate.id} "
                    f"(score {result.similarity_score:.0f}, {distance:.1f}m)"
                )
                return DuplicateMatch(
                    primary_id=candidate.id,
                    similarity_score=result.similarity_score,
                    distance_meters=distance,
                    reasoning=result.reasoning,
                )

        return None

    def _compare(self, photo: bytes, candidate_photo: bytes, timeout: float) -> SimilarityResult:
        """
        Run one oracle call on its own worker, bounded by timeout.

        A call that overruns is abandoned with its worker, so a hung call
        never delays the next candidate. Every failure becomes
        SimilarityOracleError.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="similarity")
        future = executor.submit(self.oracle.compare, photo, candidate_photo, timeout)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeout:
            raise SimilarityOracleError(f"comparison timed out after {timeout}s")
        except SimilarityOracleError:
            raise
        except Exception as e:
            raise SimilarityOracleError(f"unexpected oracle failure: {e}") from e
        finally:
            executor.shutdown(wait=False)
