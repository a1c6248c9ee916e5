# linecommander/transport/registry.py
from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional

from .base import Transport
from .errors import TransportError
from .tcp import TCPTransport
from .uart import UARTTransport


TransportFactory = Callable[..., Transport]


class TransportDriverRegistry:
    """
    Driver key ("uart", "tcp", ...) -> transport factory.

    Keys are case-insensitive. create() builds an unopened transport; the
    session decides when to open it.
    """

    def __init__(self, drivers: Optional[Mapping[str, TransportFactory]] = None):
        self._drivers: Dict[str, TransportFactory] = {}
        for key, factory in (drivers or {}).items():
            self.register(key, factory)

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls({"uart": UARTTransport, "tcp": TCPTransport})

    def register(self, driver: str, factory: TransportFactory) -> None:
        key = driver.strip().lower()
        if not key:
            raise ValueError("driver key must not be empty")
        self._drivers[key] = factory

    def names(self) -> list[str]:
        return sorted(self._drivers)

    def has(self, driver: str) -> bool:
        return driver.strip().lower() in self._drivers

    def get_class(self, driver: str) -> TransportFactory:
        try:
            return self._drivers[driver.strip().lower()]
        except KeyError:
            raise TransportError(
                f"unknown transport driver '{driver}' (known: {', '.join(self.names()) or '-'})"
            ) from None

    def create(self, driver: str, **params) -> Transport:
        factory = self.get_class(driver)
        try:
            return factory(**params)
        except TypeError as e:
            raise TransportError(f"bad parameters for transport driver '{driver}': {e}") from None
