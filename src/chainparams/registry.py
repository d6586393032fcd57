"""Selection of the active network.

A process picks its network once, early during startup, and reads it from
anywhere afterwards. `NetworkRegistry` holds that choice; the module-level
functions operate on a shared default registry.
"""

from __future__ import annotations

import logging
import threading
import typing as t

from . import network
from .exceptions import SelectionError
from .network import NetworkId, NetworkParameters, UnitTestParameters

LOG = logging.getLogger(__name__)


class NetworkRegistry:
    def __init__(
        self, networks: t.Iterable[NetworkParameters] = network.ALL_NETWORKS
    ) -> None:
        self._networks: dict[NetworkId, NetworkParameters] = {}
        for params in networks:
            if params.network_id in self._networks:
                raise ValueError(f"Duplicate network: {params.name}")
            self._networks[params.network_id] = params
        self._lock = threading.Lock()
        self._current: NetworkParameters | None = None

    def lookup(self, network_id: NetworkId | str) -> NetworkParameters:
        """Return the parameters of a network without selecting it."""
        if isinstance(network_id, str):
            network_id = NetworkId.from_name(network_id)
        try:
            return self._networks[network_id]
        except KeyError:
            raise SelectionError(f"Unknown network: {network_id}") from None

    def select(self, network_id: NetworkId | str) -> NetworkParameters:
        """Make a network the active one.

        Selecting the active network again does nothing. Once a network is
        active, selecting a different one raises `SelectionError`.
        """
        params = self.lookup(network_id)
        with self._lock:
            if self._current is params:
                return params
            if self._current is not None:
                raise SelectionError(
                    f"Network {self._current.name} already selected, cannot switch to {params.name}"
                )
            self._current = params
        LOG.info("Using network %s", params.name)
        return params

    def select_from_flags(
        self, testnet: bool = False, regtest: bool = False
    ) -> NetworkParameters:
        return self.select(NetworkId.from_flags(testnet=testnet, regtest=regtest))

    def is_selected(self) -> bool:
        return self._current is not None

    def current(self) -> NetworkParameters:
        """Return the active network.

        Raises `SelectionError` if no network has been selected yet.
        """
        current = self._current
        if current is None:
            raise SelectionError("No network selected")
        return current

    def modifiable(self) -> UnitTestParameters:
        """Return the active network for modification.

        Only the unit test network can be modified.
        """
        current = self.current()
        if not isinstance(current, UnitTestParameters):
            raise SelectionError(
                f"Network {current.name} cannot be modified, select unittest first"
            )
        return current

    def reset(self) -> None:
        with self._lock:
            self._current = None


DEFAULT_REGISTRY = NetworkRegistry()


def select_network(network_id: NetworkId | str) -> NetworkParameters:
    return DEFAULT_REGISTRY.select(network_id)


def select_network_from_flags(
    testnet: bool = False, regtest: bool = False
) -> NetworkParameters:
    return DEFAULT_REGISTRY.select_from_flags(testnet=testnet, regtest=regtest)


def current_network() -> NetworkParameters:
    return DEFAULT_REGISTRY.current()


def lookup_network(network_id: NetworkId | str) -> NetworkParameters:
    return DEFAULT_REGISTRY.lookup(network_id)


def network_selected() -> bool:
    return DEFAULT_REGISTRY.is_selected()


def modifiable_network() -> UnitTestParameters:
    return DEFAULT_REGISTRY.modifiable()
