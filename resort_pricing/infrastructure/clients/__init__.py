"""External service clients."""
from resort_pricing.infrastructure.clients.base import BaseHTTPClient
from resort_pricing.infrastructure.clients.redemption_client import RedemptionClient

__all__ = ["BaseHTTPClient", "RedemptionClient"]
