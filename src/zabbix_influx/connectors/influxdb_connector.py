import asyncio
import logging
import re
from itertools import chain
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..app_settings import AppSettings, app_settings
from ..clients.base import DataSource
from ..clients.registry import DataSourceRegistry
from ..entities.connector import ConnectorOptions
from ..entities.item import MonitoredItem, QueryOptions
from ..entities.series import TimeSeries
from ..enums.consolidation import ConsolidateBy
from ..enums.value_type import ValueType
from ..exceptions.connector_exceptions import UnsupportedValueTypeError
from .db_connector import DBConnector

logger = logging.getLogger(__name__)

HISTORY_TABLES: Dict[str, str] = {
    ValueType.FLOAT.value: "history",
    ValueType.TEXT.value: "history_str",
    ValueType.LOG.value: "history_log",
    ValueType.UINT.value: "history_uint",
    ValueType.LONGTEXT.value: "history_text",
}

TREND_TABLES: Dict[str, str] = {
    ValueType.FLOAT.value: "trends",
    ValueType.UINT.value: "trends_uint",
}

CONSOLIDATE_FUNCTIONS: Dict[ConsolidateBy, str] = {
    ConsolidateBy.AVG: "MEAN",
    ConsolidateBy.MIN: "MIN",
    ConsolidateBy.MAX: "MAX",
    ConsolidateBy.SUM: "SUM",
    ConsolidateBy.COUNT: "COUNT",
}

# Trend rows hold hourly min/max/avg/num; sum is rebuilt as num * avg per hour
TREND_VALUE_COLUMNS: Dict[ConsolidateBy, str] = {
    ConsolidateBy.AVG: "value_avg",
    ConsolidateBy.MIN: "value_min",
    ConsolidateBy.MAX: "value_max",
    ConsolidateBy.SUM: "num*value_avg",
}

ItemLike = Union[MonitoredItem, Mapping[str, Any]]
OptionsLike = Union[QueryOptions, Mapping[str, Any]]


class InfluxDBConnector(DBConnector):
    """Reads Zabbix history and trends stored in InfluxDB as named point series."""

    def __init__(
        self,
        options: Optional[ConnectorOptions] = None,
        registry: Optional[DataSourceRegistry] = None,
        data_source: Optional[DataSource] = None,
        settings: AppSettings = app_settings,
        strict_value_types: Optional[bool] = None,
    ):
        super().__init__(options, registry=registry, data_source=data_source, settings=settings)
        defaults = settings.get_connector_defaults()
        self.limit = self.options.limit or defaults["limit"]
        self.strict_value_types = (
            defaults["strict_value_types"] if strict_value_types is None else strict_value_types
        )

    async def fetch_history(
        self,
        items: Iterable[ItemLike],
        time_from: int,
        time_till: int,
        options: OptionsLike,
    ) -> List[TimeSeries]:
        query_options = _query_options(options)
        agg_function = CONSOLIDATE_FUNCTIONS[query_options.consolidation]

        queries = [
            build_history_query(
                [item.itemid for item in group],
                table,
                time_from,
                time_till,
                query_options.interval_sec,
                agg_function,
            )
            for table, group in self._partition(items, HISTORY_TABLES, "history")
        ]
        return await self._run_queries(queries)

    async def fetch_trends(
        self,
        items: Iterable[ItemLike],
        time_from: int,
        time_till: int,
        options: OptionsLike,
    ) -> List[TimeSeries]:
        query_options = _query_options(options)
        consolidation = query_options.consolidation
        agg_function = CONSOLIDATE_FUNCTIONS[consolidation]
        value_column = TREND_VALUE_COLUMNS.get(consolidation, TREND_VALUE_COLUMNS[ConsolidateBy.AVG])

        queries = [
            build_trends_query(
                [item.itemid for item in group],
                table,
                time_from,
                time_till,
                query_options.interval_sec,
                agg_function,
                value_column,
            )
            for table, group in self._partition(items, TREND_TABLES, "trend")
        ]
        return await self._run_queries(queries)

    async def invoke_query(self, query: str) -> List[Optional[Dict[str, Any]]]:
        data_source = await self.get_data_source()
        logger.debug(f"InfluxDB query: {query}")
        data = await data_source.series_query(query)
        return data["results"] if data and data.get("results") else []

    def _partition(self, items: Iterable[ItemLike], tables: Mapping[str, str], kind: str):
        """Group items by value type and pair each group with its table."""
        grouped: Dict[str, List[MonitoredItem]] = {}
        for item in items:
            item = item if isinstance(item, MonitoredItem) else MonitoredItem.model_validate(item)
            grouped.setdefault(item.value_type, []).append(item)

        partitions = []
        for value_type, group in grouped.items():
            table = tables.get(value_type)
            if table is None:
                if self.strict_value_types:
                    raise UnsupportedValueTypeError(value_type, kind)
                logger.warning(
                    f"Skipping {len(group)} item(s) with value type {value_type!r}: no {kind} table"
                )
                continue
            partitions.append((table, group))
        return partitions

    async def _run_queries(self, queries: Sequence[str]) -> List[TimeSeries]:
        if not queries:
            return []
        try:
            responses = await asyncio.gather(*(self.invoke_query(query) for query in queries))
        except Exception as e:
            logger.error(f"InfluxDB query failed: {e}")
            raise

        series_list = handle_history_response(list(chain.from_iterable(responses)))
        for series in series_list:
            if len(series.points) > self.limit:
                logger.warning(
                    f"Series {series.name} returned {len(series.points)} points, above limit {self.limit}"
                )
        return series_list


def _query_options(options: OptionsLike) -> QueryOptions:
    if isinstance(options, QueryOptions):
        return options
    return QueryOptions.model_validate(options)


def build_history_query(
    itemids: Sequence[str],
    table: str,
    time_from: int,
    time_till: int,
    interval_sec: int,
    agg_function: str,
) -> str:
    where_clause = build_where_clause(itemids)
    query = f"""
        SELECT {agg_function}("value") FROM "{table}"
        WHERE {where_clause} AND "time" >= {time_from}s AND "time" <= {time_till}s
        GROUP BY time({interval_sec}s), "itemid" fill(linear)
    """
    return compact_query(query)


def build_trends_query(
    itemids: Sequence[str],
    table: str,
    time_from: int,
    time_till: int,
    interval_sec: int,
    agg_function: str,
    value_column: str,
) -> str:
    where_clause = build_where_clause(itemids)
    query = f"""
        SELECT {agg_function}("{value_column}") FROM "{table}"
        WHERE {where_clause} AND "time" >= {time_from}s AND "time" <= {time_till}s
        GROUP BY time({interval_sec}s)
    """
    return compact_query(query)


def build_where_clause(itemids: Sequence[str]) -> str:
    itemids_where = " OR ".join(f"\"itemid\" = '{quote_string(itemid)}'" for itemid in itemids)
    return f"({itemids_where})"


def quote_string(value: str) -> str:
    """Escape a value for use inside an InfluxQL single-quoted string literal."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def compact_query(query: str) -> str:
    return re.sub(r"\s+", " ", query).strip()


def handle_history_response(results: Optional[Sequence[Optional[Dict[str, Any]]]]) -> List[TimeSeries]:
    """
    Convert InfluxDB statement results into named point series.

    Each series is named after its ``itemid`` tag (the measurement name when the
    query was not grouped by item) and its rows are flipped from
    ``[time, value]`` to ``[value, time]``, keeping row order.
    """
    if not results:
        return []

    series_list = []
    for result in results:
        if not result or not result.get("series"):
            continue

        for influx_series in result["series"]:
            tags = influx_series.get("tags") or {}
            name = tags.get("itemid", influx_series.get("name"))
            points = [[row[1], row[0]] for row in influx_series.get("values") or []]
            series_list.append(TimeSeries(name=name, points=points))

    return series_list
