"""Monitoring configuration for vocabmaster."""
from prometheus_client import Counter, Histogram, start_http_server

# Progress metrics
attempts_recorded = Counter(
    "vocabmaster_attempts_recorded_total",
    "Total number of answer attempts recorded",
    ["category"],
)

mastery_recalculations = Counter(
    "vocabmaster_mastery_recalculations_total",
    "Total number of mastery level recalculations",
)

mastery_levels = Histogram(
    "vocabmaster_mastery_level",
    "Distribution of computed mastery levels",
    buckets=[5, 20, 40, 60, 80, 100],
)

unit_resets = Counter(
    "vocabmaster_unit_resets_total",
    "Total number of unit progress resets",
)

# Quiz metrics
quiz_selections = Counter(
    "vocabmaster_quiz_selections_total",
    "Total number of quiz word selections",
    ["strategy"],
)

# Database metrics
db_errors = Counter(
    "vocabmaster_db_errors_total",
    "Total number of database errors",
    ["operation"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
