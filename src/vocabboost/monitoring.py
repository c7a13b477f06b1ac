"""Monitoring configuration for vocabboost."""
from prometheus_client import Counter, Gauge, start_http_server

# Review metrics
reviews_total = Counter(
    "vocabboost_reviews_total",
    "Total number of review actions",
    ["outcome"],
)

words_graduated = Counter(
    "vocabboost_words_graduated_total",
    "Total number of reviews that moved a word to the graduated level",
)

# Queue metrics
queue_rebuilds = Counter(
    "vocabboost_queue_rebuilds_total",
    "Total number of review queue rebuilds",
)

queue_size = Gauge(
    "vocabboost_queue_size",
    "Number of words in the most recently built review queue",
)

# Import metrics
words_imported = Counter(
    "vocabboost_words_imported_total",
    "Total number of words read from import files",
)

# Storage metrics
storage_operations = Counter(
    "vocabboost_storage_operations_total",
    "Total number of snapshot storage operations",
    ["operation_type"],
)

storage_errors = Counter(
    "vocabboost_storage_errors_total",
    "Total number of snapshot storage errors",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
