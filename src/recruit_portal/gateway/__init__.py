"""HTTP gateway to the remote screening service."""

from .client import GatewayResult, ResourceGateway, validate_registration
from .reports import report_filename, save_report

__all__ = [
    "GatewayResult",
    "ResourceGateway",
    "validate_registration",
    "report_filename",
    "save_report",
]
