import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from ..app_settings import AppSettings, app_settings
from ..exceptions.connector_exceptions import DataSourceResolutionError
from .base import DataSource
from .influxdb import InfluxDBDataSource

logger = logging.getLogger(__name__)

SourceOrFactory = Union[DataSource, Callable[[], Any]]


class DataSourceRegistry:
    """Resolves data sources by uid or name."""

    def __init__(self):
        self._entries: Dict[str, SourceOrFactory] = {}
        self._aliases: Dict[str, str] = {}
        self._resolved: Dict[str, DataSource] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def register(self, name: str, source: SourceOrFactory, uid: Optional[str] = None) -> None:
        """Register a data source instance, or a zero-argument (async) factory building one."""
        self._entries[name] = source
        self._resolved.pop(name, None)
        if uid is not None:
            self._aliases[uid] = name

    def names(self) -> List[str]:
        return list(self._entries)

    async def get(self, key: str) -> DataSource:
        name = self._aliases.get(key, key)
        if name in self._resolved:
            return self._resolved[name]
        if name not in self._entries:
            raise DataSourceResolutionError(f"Data source {key!r} not found")

        async with self._locks.setdefault(name, asyncio.Lock()):
            if name not in self._resolved:
                self._resolved[name] = await self._create(name, key)
        return self._resolved[name]

    async def _create(self, name: str, key: str) -> DataSource:
        source = self._entries[name]
        if not _is_factory(source):
            return source
        try:
            source = source()
            if inspect.isawaitable(source):
                source = await source
        except Exception as e:
            logger.error(f"Failed to create data source {name}: {e}")
            raise DataSourceResolutionError(f"Data source {key!r} could not be created: {e}") from e
        return source


def _is_factory(source: SourceOrFactory) -> bool:
    return inspect.isclass(source) or (callable(source) and not hasattr(source, "series_query"))


def create_default_registry(settings: AppSettings = app_settings) -> DataSourceRegistry:
    """Registry holding the InfluxDB data source described by settings."""
    registry = DataSourceRegistry()
    registry.register(
        settings.influxdb_datasource_name,
        lambda: InfluxDBDataSource.from_settings(settings),
    )
    return registry
