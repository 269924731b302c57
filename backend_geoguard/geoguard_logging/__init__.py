"""
Structured logging for Backend GeoGuard.

JSON records with event_type, timestamp and, for evaluations, employee_id
and risk_flags. Every module takes its logger from get_logger().
"""

from backend_geoguard.geoguard_logging.logger import bind_employee, configure_structlog, get_logger

__all__ = ["bind_employee", "configure_structlog", "get_logger"]
