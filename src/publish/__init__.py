"""
Publishing layer.

Formats subject reports and delivers them to a message transport off the
detection loop.
"""

from .dispatcher import PublishDispatcher, DispatchStats
from .report import format_count_report, format_detailed_report, get_formatter
from .transport import Transport, LogTransport, MqttTransport, create_transport

__all__ = [
    "PublishDispatcher",
    "DispatchStats",
    "format_count_report",
    "format_detailed_report",
    "get_formatter",
    "Transport",
    "LogTransport",
    "MqttTransport",
    "create_transport",
]
