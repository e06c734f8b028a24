"""
Prometheus metrics collection and custom business metrics.
"""
from prometheus_client import Counter, Histogram, Gauge, Info
from prometheus_client import CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST

registry = CollectorRegistry()

# Application info
app_info = Info('app', 'Application information', registry=registry)
app_info.info({
    'name': 'Data Catalog',
    'version': '1.0.0'
})

# HTTP Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

http_requests_in_progress = Gauge(
    'http_requests_in_progress',
    'Number of HTTP requests in progress',
    ['method', 'endpoint'],
    registry=registry
)

# Catalog Metrics
data_products_registered_total = Counter(
    'data_products_registered_total',
    'Total number of data products registered',
    ['domain'],
    registry=registry
)

quality_observations_total = Counter(
    'quality_observations_total',
    'Total number of quality metric observations recorded',
    ['metric_type'],
    registry=registry
)

comment_reactions_total = Counter(
    'comment_reactions_total',
    'Total comment reactions by outcome',
    ['reaction_type', 'outcome'],  # outcome: recorded, duplicate
    registry=registry
)

catalog_data_products = Gauge(
    'catalog_data_products',
    'Data products in the catalog, sampled at scrape time',
    registry=registry
)

lineage_default_chains_total = Counter(
    'lineage_default_chains_total',
    'Number of default lineage chains materialised on first read',
    registry=registry
)

# Usage tracking
usage_records_failed_total = Counter(
    'usage_records_failed_total',
    'Number of API usage rows that could not be written',
    registry=registry
)

# Error Metrics
errors_total = Counter(
    'errors_total',
    'Total number of errors',
    ['error_type', 'endpoint'],
    registry=registry
)


def get_metrics():
    """
    Get current metrics in Prometheus format.

    Returns:
        Prometheus metrics in text format
    """
    return generate_latest(registry)


def get_metrics_content_type():
    """Content type for the Prometheus exposition format."""
    return CONTENT_TYPE_LATEST


def normalize_path(path: str) -> str:
    """
    Normalize a request path to reduce label cardinality.

    Args:
        path: Original request path

    Returns:
        Normalized path with IDs replaced by placeholders
    """
    normalized_parts = []
    for part in path.split('/'):
        if part.isdigit():
            normalized_parts.append('{id}')
        elif len(part) == 36 and part.count('-') == 4:  # UUID pattern
            normalized_parts.append('{uuid}')
        else:
            normalized_parts.append(part)

    return '/'.join(normalized_parts)
