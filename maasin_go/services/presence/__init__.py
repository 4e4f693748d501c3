"""
Реестр присутствия водителей: публикация статуса и снимок активных водителей.
"""

from maasin_go.services.presence.policy import filter_visible, parse_vehicle_filter
from maasin_go.services.presence.repository import DriverRepository
from maasin_go.services.presence.service import PresenceRegistry

__all__ = ["DriverRepository", "PresenceRegistry", "filter_visible", "parse_vehicle_filter"]
