from prometheus_client import Counter, Histogram, REGISTRY


# reuse already-registered collectors so hot reloads and repeated test imports work
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "chains_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "chains_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

CHAINS_GENERATED_TOTAL = get_or_create_metric(
    "chains_generated_total",
    "Chains placed into daily plans",
    Counter,
    labelnames=["kind"],
)

CHAINS_DROPPED_TOTAL = get_or_create_metric(
    "chains_dropped_total",
    "Chains left out because they did not fit",
    Counter,
    labelnames=["kind"],
)

CALENDAR_ERRORS_TOTAL = get_or_create_metric(
    "calendar_errors_total", "Failed calendar reads", Counter
)
