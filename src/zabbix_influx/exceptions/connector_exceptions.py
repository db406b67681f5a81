class ConnectorException(Exception):
    """Base exception for the Zabbix InfluxDB connector."""
    pass


class DataSourceResolutionError(ConnectorException):
    """Raised when the backing data source cannot be resolved."""
    pass


class DataSourceConnectionError(ConnectorException):
    """Raised when the InfluxDB host cannot be reached."""
    pass


class QueryExecutionError(ConnectorException):
    """Raised when InfluxDB rejects or fails to answer a query."""
    pass


class UnsupportedValueTypeError(ConnectorException):
    """Raised when an item value type has no backing table."""

    def __init__(self, value_type: str, kind: str):
        self.value_type = value_type
        self.kind = kind
        super().__init__(f"No {kind} table for value type {value_type!r}")
