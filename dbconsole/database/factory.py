"""
Adapter Factory - engine tag to adapter class.

Stateless: every call returns a brand-new adapter, so it is safe to call
from any number of concurrent requests.
"""
from typing import Callable, Dict

from dbconsole.core.exceptions import UnsupportedEngineError
from dbconsole.database.adapters import (
    DatabaseAdapter,
    MySQLAdapter,
    MySQLProxyAdapter,
    PostgreSQLAdapter,
    SQLiteAdapter,
)
from dbconsole.database.adapters.mysql_proxy import DEFAULT_PROXY_TIMEOUT_SECONDS
from dbconsole.database.models import ConnectionDescriptor, EngineType


class AdapterFactory:
    """
    Builds the adapter matching a descriptor's engine.

    Example:
        >>> factory = AdapterFactory()
        >>> adapter = factory.create(descriptor)
        >>> with adapter:
        ...     tables = adapter.get_tables()
    """

    def __init__(self, proxy_timeout_seconds: float = DEFAULT_PROXY_TIMEOUT_SECONDS):
        self.proxy_timeout_seconds = proxy_timeout_seconds
        self._builders: Dict[EngineType, Callable[[ConnectionDescriptor], DatabaseAdapter]] = {
            EngineType.MYSQL: MySQLAdapter,
            EngineType.MYSQL_PROXY: self._build_proxy,
            EngineType.POSTGRESQL: PostgreSQLAdapter,
            EngineType.SQLITE: SQLiteAdapter,
        }

    def _build_proxy(self, descriptor: ConnectionDescriptor) -> DatabaseAdapter:
        return MySQLProxyAdapter(descriptor, timeout_seconds=self.proxy_timeout_seconds)

    def create(self, descriptor: ConnectionDescriptor) -> DatabaseAdapter:
        """
        Build a fresh adapter for the descriptor.

        Raises:
            UnsupportedEngineError: If no adapter exists for the engine
        """
        builder = self._builders.get(descriptor.engine)
        if builder is None:
            raise UnsupportedEngineError(descriptor.engine)
        return builder(descriptor)

    __call__ = create
