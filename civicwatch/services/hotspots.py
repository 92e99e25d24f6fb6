"""
Hotspot Clusterer - proximity clustering of recent reports.

Algorithm (single pass, seed radius):
1. Walk reports in input order, skipping ones already placed
2. Each unplaced report seeds a new cluster
3. Every later unplaced report within radius OF THE SEED joins it
4. Center is the mean of member coordinates once membership is fixed

Membership never depends on the mean center, so the same input always
yields the same clusters.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from civicwatch.models.analytics import Cluster, GeoPoint
from civicwatch.models.report import Report, Severity
from civicwatch.utils.geo import centroid, haversine_meters

logger = logging.getLogger(__name__)


def top_key(histogram: Dict[str, int]) -> Optional[str]:
    """Key with the highest count; ties go to the lexically smallest key."""
    if not histogram:
        return None
    return min(histogram.items(), key=lambda item: (-item[1], item[0]))[0]


class HotspotClusterer:

    DEFAULT_RADIUS_METERS = 100.0
    DEFAULT_RECENT_DAYS = 7
    DEFAULT_MIN_REPORTS = 3

    def __init__(
        self,
        radius_meters: float = DEFAULT_RADIUS_METERS,
        recent_days: int = DEFAULT_RECENT_DAYS,
        min_reports: int = DEFAULT_MIN_REPORTS
    ):
        self.radius_meters = radius_meters
        self.recent_days = recent_days
        self.min_reports = min_reports

    def cluster(self, reports: List[Report], now: datetime) -> List[Cluster]:
        """
        Partition reports into seed-radius clusters.

        Args:
            reports: Reports in the order they should be visited
            now: Reference time for growth rates

        Returns:
            Clusters in seed order
        """
        visited = set()
        clusters = []

        for i, seed in enumerate(reports):
            if i in visited:
                continue
            visited.add(i)
            members = [seed]

            for j in range(i + 1, len(reports)):
                if j in visited:
                    continue
                other = reports[j]
                distance = haversine_meters(seed.latitude, seed.longitude, other.latitude, other.longitude)
                if distance <= self.radius_meters:
                    members.append(other)
                    visited.add(j)

            clusters.append(self._build_cluster(members, now))

        logger.debug(f"Clustered {len(reports)} reports into {len(clusters)} clusters")
        return clusters

    def _build_cluster(self, members: List[Report], now: datetime) -> Cluster:
        lat, lng = centroid([(r.latitude, r.longitude) for r in members])

        categories: Dict[str, int] = defaultdict(int)
        severity: Dict[str, int] = {level.value: 0 for level in Severity}
        for report in members:
            categories[report.category] += 1
            severity[report.severity] = severity.get(report.severity, 0) + 1

        return Cluster(
            center=GeoPoint(lat=lat, lng=lng),
            reports=members,
            count=len(members),
            categories=dict(categories),
            severity=severity,
            top_category=top_key(categories),
            top_severity=top_key(severity),
            growth_rate=self.growth_rate(members, now),
        )

    def growth_rate(self, members: List[Report], now: datetime) -> float:
        """
        Percent change of recent reports over older ones.

        100 when nothing is older, 0 when nothing is recent.
        """
        cutoff = now - timedelta(days=self.recent_days)
        recent = sum(1 for r in members if r.created_at >= cutoff)
        older = len(members) - recent

        if older == 0:
            return 100.0
        if recent == 0:
            return 0.0
        return (recent - older) / older * 100

    def emerging_hotspots(self, reports: List[Report], now: datetime) -> List[Cluster]:
        """Clusters with at least min_reports members, fastest growing first."""
        hotspots = [c for c in self.cluster(reports, now) if c.count >= self.min_reports]
        hotspots.sort(key=lambda c: c.growth_rate, reverse=True)
        return hotspots
