"""ISO 8601 duration parsing and length bucketing."""

import re
from typing import Dict, List, Tuple

_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")

# (exclusive upper bound in seconds, tag); the last entry catches everything else
BucketTable = List[Tuple[float, str]]

FINE_BUCKETS: BucketTable = [
    (60, "short1"),
    (120, "short2"),
    (600, "mid1"),
    (1200, "mid2"),
    (1800, "long1"),
    (2400, "long2"),
    (3000, "long3"),
    (3600, "long4"),
    (5400, "long5"),
    (float("inf"), "long6"),
]

# Same thresholds as the YouTube search videoDuration filter
COARSE_BUCKETS: BucketTable = [
    (240, "short"),
    (1200, "medium"),
    (float("inf"), "long"),
]

BUCKET_TABLES: Dict[str, BucketTable] = {
    "fine": FINE_BUCKETS,
    "coarse": COARSE_BUCKETS,
}

BUCKET_LABELS = {
    "short1": "Short Form1 (under 1 min)",
    "short2": "Short Form2 (1-2 min)",
    "mid1": "Mid Form1 (2-10 min)",
    "mid2": "Mid Form2 (10-20 min)",
    "long1": "Long Form1 (20-30 min)",
    "long2": "Long Form2 (30-40 min)",
    "long3": "Long Form3 (40-50 min)",
    "long4": "Long Form4 (50-60 min)",
    "long5": "Long Form5 (60-90 min)",
    "long6": "Long Form6 (90 min and over)",
    "short": "Short (under 4 min)",
    "medium": "Medium (4-20 min)",
    "long": "Long (20 min and over)",
}


def parse_duration(duration: str) -> int:
    """Parse ISO 8601 duration to seconds.

    Args:
        duration: Duration string like "PT5M30S" or "PT1H2M3S"

    Returns:
        Duration in seconds; 0 for empty or malformed input
    """
    if not duration:
        return 0

    match = _DURATION_RE.match(duration.strip())
    if not match:
        return 0

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)
    return hours * 3600 + minutes * 60 + seconds


def duration_bucket(seconds: int, table: BucketTable = FINE_BUCKETS) -> str:
    """Classify a duration into its bucket tag."""
    for upper_bound, tag in table:
        if seconds < upper_bound:
            return tag
    return table[-1][1]


def matches_buckets(tag: str, selected) -> bool:
    """True when no filter is selected or ``tag`` is in the selection."""
    return not selected or tag in selected


def format_duration(seconds: int) -> str:
    """Format seconds as HH:MM:SS, or MM:SS under an hour."""
    if not seconds:
        return "00:00"

    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def bucket_label(tag: str) -> str:
    """Human readable label for a bucket tag."""
    return BUCKET_LABELS.get(tag) or tag or "Unknown"
