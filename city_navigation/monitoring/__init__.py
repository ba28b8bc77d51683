from city_navigation.monitoring.metrics import get_metrics, record_request, record_route_estimate

__all__ = ["get_metrics", "record_request", "record_route_estimate"]
