"""
Prometheus metrics for the drills service.
Exposed over HTTP by the service app at /metrics.
"""
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Attempts scored, by drill difficulty
attempts_total = Counter(
    "drills_attempts_total",
    "Total number of scored attempts",
    ["difficulty"],
)

# Distribution of aggregate attempt scores (0..100)
attempt_score = Histogram(
    "drills_attempt_score",
    "Aggregate attempt score in percent",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

# Drill list cache lookups
cache_lookups_total = Counter(
    "drills_list_cache_lookups_total",
    "Drill list cache lookups",
    ["result"],
)


def mark_attempt(difficulty: str, score: int) -> None:
    """Record one scored attempt."""
    attempts_total.labels(difficulty=difficulty).inc()
    attempt_score.observe(score)


def mark_cache(hit: bool) -> None:
    cache_lookups_total.labels(result="hit" if hit else "miss").inc()


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
