"""Ordered interceptor chain around a single HTTP call.

Each interceptor receives the request and a ``call_next`` callable that
runs the rest of the chain, ending with the transport. Interceptors are
registered under a stable name; installing a name that is already present
replaces the earlier registration, so reconfiguring a client never stacks
the same behavior twice.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Optional

import requests

# Position of each named interceptor, outermost first.
PIPELINE_ORDER = ("user_agent", "cache", "rate_limit")


@dataclass(frozen=True)
class RequestDescriptor:
    """One outbound HTTP request. Built fresh for every call."""

    method: str
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None


Handler = Callable[[RequestDescriptor], requests.Response]


class Interceptor(ABC):
    """A behavior applied around the outbound call."""

    @abstractmethod
    def intercept(self, request: RequestDescriptor, call_next: Handler) -> requests.Response:
        """Handle ``request``, delegating to ``call_next`` to continue the chain."""


class Pipeline:
    """Named, ordered list of interceptors."""

    def __init__(self) -> None:
        self._interceptors: list[tuple[str, Interceptor]] = []

    def install(self, name: str, interceptor: Interceptor) -> None:
        """Register ``interceptor`` under ``name``, replacing any previous one.

        Raises:
            ValueError: If ``name`` has no slot in ``PIPELINE_ORDER``
        """
        if name not in PIPELINE_ORDER:
            raise ValueError(f"Unknown interceptor name: {name}")

        self.remove(name)
        self._interceptors.append((name, interceptor))
        self._interceptors.sort(key=lambda item: PIPELINE_ORDER.index(item[0]))

    def remove(self, name: str) -> None:
        self._interceptors = [item for item in self._interceptors if item[0] != name]

    def get(self, name: str) -> Optional[Interceptor]:
        for registered, interceptor in self._interceptors:
            if registered == name:
                return interceptor
        return None

    def names(self) -> list[str]:
        return [name for name, _ in self._interceptors]

    def __len__(self) -> int:
        return len(self._interceptors)

    def handle(self, request: RequestDescriptor, transport: Handler) -> requests.Response:
        """Run ``request`` through every interceptor, then ``transport``."""
        # Snapshot so a reconfiguration mid-call does not affect this request.
        chain = list(self._interceptors)

        def dispatch(index: int, current: RequestDescriptor) -> requests.Response:
            if index == len(chain):
                return transport(current)
            _, interceptor = chain[index]
            return interceptor.intercept(current, partial(dispatch, index + 1))

        return dispatch(0, request)
