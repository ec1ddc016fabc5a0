"""Monitoring configuration for the scheduler."""
from prometheus_client import Counter, Histogram, start_http_server

# Review metrics
reviews_processed = Counter(
    "vocabsrs_reviews_processed_total",
    "Total number of review events applied to progress records",
    ["outcome"],
)

words_introduced = Counter(
    "vocabsrs_words_introduced_total",
    "Total number of words moved out of the virtual NEW status",
)

words_mastered = Counter(
    "vocabsrs_words_mastered_total",
    "Total number of reviews that ended in the MASTERED status",
)

mastery_revoked = Counter(
    "vocabsrs_mastery_revoked_total",
    "Total number of failed reviews that revoked mastery",
)

progress_resets = Counter(
    "vocabsrs_progress_resets_total",
    "Total number of words reset back to NEW",
)

review_duration = Histogram(
    "vocabsrs_review_duration_seconds",
    "Duration of a read-modify-write review in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
)

# Judge metrics
judge_errors = Counter(
    "vocabsrs_judge_errors_total",
    "Total number of explanation judge failures",
    ["error_type"],
)

# Store metrics
store_operations = Counter(
    "vocabsrs_store_operations_total",
    "Total number of progress store operations",
    ["operation_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
