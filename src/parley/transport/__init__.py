"""Parley Transport: where privacy rule lists are read from and written to.

Two backends ship with the package:

* ``"memory"``: rule lists held in a dict, lost when the process exits
* ``"http"``: a rules endpoint reached over aiohttp

Pick one by name::

    from parley.transport import get_transport, TransportConfig

    transport = get_transport(TransportConfig(backend="http", base_url=url))
    rules = await transport.fetch_rules(PrivacyKey.PHONE_NUMBER)

Other backends are plugged in with :func:`register_backend`, passing any
callable that turns a :class:`TransportConfig` into a :class:`RuleTransport`.
"""

from __future__ import annotations

from collections.abc import Callable

from ..core.exceptions import ConfigException
from .adapter import RuleTransport, TransportConfig, TransportError

TransportFactory = Callable[[TransportConfig], RuleTransport]


def _memory_backend(config: TransportConfig) -> RuleTransport:
    from .memory import InMemoryRuleTransport

    return InMemoryRuleTransport(config)


def _http_backend(config: TransportConfig) -> RuleTransport:
    # aiohttp is only imported once an http transport is asked for.
    from .http_transport import HttpRuleTransport

    return HttpRuleTransport(config)


BACKEND_REGISTRY: dict[str, TransportFactory] = {
    "memory": _memory_backend,
    "http": _http_backend,
}


def register_backend(name: str, factory: TransportFactory) -> None:
    """Make ``factory`` selectable as ``TransportConfig(backend=name)``.

    Raises:
        ConfigException: If ``factory`` is not callable
    """
    if not callable(factory):
        raise ConfigException(f"Transport factory for {name!r} is not callable", {"backend": name})
    BACKEND_REGISTRY[name] = factory


def get_transport(config: TransportConfig | None = None) -> RuleTransport:
    """Build the transport named by ``config.backend``.

    Falls back to :meth:`TransportConfig.from_env` when no config is given.

    Raises:
        ConfigException: For a backend name nobody registered
    """
    if config is None:
        config = TransportConfig.from_env()

    factory = BACKEND_REGISTRY.get(config.backend)
    if factory is None:
        available = ", ".join(sorted(BACKEND_REGISTRY))
        raise ConfigException(f"Unknown transport backend {config.backend!r}. Available: {available}")
    return factory(config)


__all__ = [
    "BACKEND_REGISTRY",
    "RuleTransport",
    "TransportConfig",
    "TransportError",
    "TransportFactory",
    "get_transport",
    "register_backend",
]
