"""
Клиентская часть: HTTP-клиент API и опросчик снимка водителей.
"""

from maasin_go.client.api_clients import BaseClient, CommuteApiClient
from maasin_go.client.poller import DriverPoller, PollerState

__all__ = ["BaseClient", "CommuteApiClient", "DriverPoller", "PollerState"]
