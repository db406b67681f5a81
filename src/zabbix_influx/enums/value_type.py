from enum import Enum


class ValueType(str, Enum):
    """Zabbix item value types."""
    FLOAT = "0"
    TEXT = "1"
    LOG = "2"
    UINT = "3"
    LONGTEXT = "4"
