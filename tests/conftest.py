"""Pytest configuration and shared fixtures"""
import re
from typing import Any, Dict, List, Optional

import pytest

from zabbix_influx.app_settings import AppSettings
from zabbix_influx.entities.connector import ConnectionStatus

TABLE_RE = re.compile(r'FROM "([^"]+)"')


class FakeInfluxDataSource:
    """Records submitted queries and answers with canned responses per table"""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, failures: Optional[Dict[str, Exception]] = None):
        self.responses = responses or {}
        self.failures = failures or {}
        self.queries: List[str] = []
        self.probe_status = ConnectionStatus(status="success", message="Data source is working")

    async def series_query(self, query: str) -> Dict[str, Any]:
        self.queries.append(query)
        table = TABLE_RE.search(query).group(1)
        if table in self.failures:
            raise self.failures[table]
        return self.responses.get(table, {"results": [{"statement_id": 0}]})

    async def test_datasource(self) -> ConnectionStatus:
        return self.probe_status

    def tables_queried(self) -> List[str]:
        return [TABLE_RE.search(q).group(1) for q in self.queries]


def influx_result(*series: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap series dicts into an InfluxDB /query response body"""
    return {"results": [{"statement_id": 0, "series": list(series)}]}


def influx_series(itemid: str, rows: List[List[Any]], name: str = "history") -> Dict[str, Any]:
    return {
        "name": name,
        "tags": {"itemid": itemid},
        "columns": ["time", "mean"],
        "values": rows,
    }


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file"""
    return AppSettings(_env_file=None, query_limit=10000, strict_value_types=False)


@pytest.fixture
def fake_datasource():
    return FakeInfluxDataSource()


@pytest.fixture
def sample_items():
    return [
        {"itemid": "10010", "value_type": "0"},
        {"itemid": "10011", "value_type": "3"},
    ]


@pytest.fixture
def make_datasource():
    """Factory for fake data sources with canned per-table responses"""
    return FakeInfluxDataSource


@pytest.fixture
def make_result():
    return influx_result


@pytest.fixture
def make_series():
    return influx_series
