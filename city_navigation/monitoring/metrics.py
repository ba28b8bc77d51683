"""In-memory counters for /metrics: request status buckets, per-route counts, route estimates by mode."""
import time
from collections import Counter
from threading import Lock

_start_time = time.monotonic()
_status_counts: Counter[str] = Counter()
# Keyed by route template (or UNMATCHED_PATH), never by raw request path
_path_counts: Counter[str] = Counter()
_estimate_counts: Counter[str] = Counter()
_lock = Lock()

UNMATCHED_PATH = "unmatched"


def _status_bucket(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "2xx"
    if 400 <= status_code < 500:
        return "4xx"
    if status_code >= 500:
        return "5xx"
    return "other"


def record_request(route: str, status_code: int) -> None:
    with _lock:
        _status_counts[_status_bucket(status_code)] += 1
        _path_counts[route] += 1


def record_route_estimate(mode: str) -> None:
    with _lock:
        _estimate_counts[mode] += 1


def get_metrics() -> dict:
    with _lock:
        statuses = dict(_status_counts)
        paths = dict(_path_counts)
        estimates = dict(_estimate_counts)
    return {
        "requests_total": sum(statuses.values()),
        "requests_2xx": statuses.get("2xx", 0),
        "requests_4xx": statuses.get("4xx", 0),
        "requests_5xx": statuses.get("5xx", 0),
        "requests_by_path": paths,
        "route_estimates_by_mode": estimates,
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
    }
