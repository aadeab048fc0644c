# DynamoDB Local Manager MCP
# File: connection.py
# Version: v1

"""Endpoint ownership for the DynamoDB dispatcher.

``ConnectionManager`` is the single owner of the current dispatcher. Changing
the endpoint builds a new dispatcher (and with it a new handle pair) instead of
mutating the old one, so calls already in flight finish against the endpoint
they started with.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .client import DynamoClient
from .config import ManagerConfig
from .settings import EndpointStore

logger = logging.getLogger(__name__)

# (config, endpoint) -> dispatcher bound to that endpoint
ClientFactory = Callable[[ManagerConfig, str], Any]


class ConnectionManager:
    """Owns the active endpoint and the dispatcher built for it."""

    def __init__(
        self,
        config: ManagerConfig,
        store: Optional[EndpointStore] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.config = config
        self.store = store or EndpointStore(path=config.settings_path)
        self._factory = client_factory or DynamoClient.connect

        endpoint = self.store.load()
        self._client = self._factory(config, endpoint)
        logger.debug("Connection manager started against %s", endpoint)

    @property
    def client(self) -> Any:
        """The dispatcher for the current endpoint."""
        return self._client

    @property
    def endpoint(self) -> str:
        return self._client.endpoint

    def set_endpoint(self, endpoint: str) -> Any:
        """Switch to ``endpoint``, persist it and return the new dispatcher.

        Callers are expected to reject empty input before getting here.
        """
        new_client = self._factory(self.config, endpoint)
        self._client = new_client
        self.store.save(endpoint)
        logger.info("DynamoDB endpoint set to %s", endpoint)
        return new_client
