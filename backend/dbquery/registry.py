"""
Process-wide registry of named QueryEngine instances.

Registration is write-once per name and lookups never construct an instance.
All operations are serialised by a lock since independent initialisation
sites may touch the registry concurrently.
"""

import logging
import threading

from dbquery.core.configurator import Configurator
from dbquery.core.errors import InstanceAlreadyExistsError
from dbquery.engines.sql.executor import QueryEngine

_log = logging.getLogger(__name__)

DEFAULT_INSTANCE_NAME = "primary"


class InstanceRegistry:
    """Write-once mapping of instance name -> QueryEngine."""

    def __init__(self) -> None:
        self._instances: dict[str, QueryEngine] = {}
        self._lock = threading.Lock()

    def set_instance(
        self, configurator: Configurator, name: str = DEFAULT_INSTANCE_NAME
    ) -> QueryEngine:
        """Create a QueryEngine for *configurator* and register it as *name*."""
        with self._lock:
            if name in self._instances:
                raise InstanceAlreadyExistsError(f'Cannot overwrite instance "{name}"')
            engine = QueryEngine(configurator)
            self._instances[name] = engine
        _log.debug("Registered instance %r (%s)", name, configurator.dsn)
        return engine

    def get_instance(self, name: str = DEFAULT_INSTANCE_NAME) -> QueryEngine | None:
        with self._lock:
            return self._instances.get(name)

    def has_instance(self, name: str = DEFAULT_INSTANCE_NAME) -> bool:
        with self._lock:
            return name in self._instances

    def clear(self) -> None:
        """Disconnect and forget every instance (test teardown / shutdown)."""
        with self._lock:
            engines = list(self._instances.values())
            self._instances.clear()
        for engine in engines:
            engine.disconnect()


_registry = InstanceRegistry()


def get_registry() -> InstanceRegistry:
    """Return the process-wide registry."""
    return _registry


def set_instance(configurator: Configurator, name: str = DEFAULT_INSTANCE_NAME) -> QueryEngine:
    return _registry.set_instance(configurator, name)


def get_instance(name: str = DEFAULT_INSTANCE_NAME) -> QueryEngine | None:
    return _registry.get_instance(name)


def has_instance(name: str = DEFAULT_INSTANCE_NAME) -> bool:
    return _registry.has_instance(name)
