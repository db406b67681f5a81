from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # InfluxDB Configuration
    influxdb_url: str = Field(default="http://localhost:8086", description="InfluxDB HTTP API URL")
    influxdb_database: str = Field(default="zabbix", description="InfluxDB database holding Zabbix history")
    influxdb_user: str = Field(default="", description="InfluxDB user")
    influxdb_password: str = Field(default="", description="InfluxDB password")
    influxdb_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    influxdb_epoch: str = Field(default="ms", description="Timestamp precision of query results")
    influxdb_datasource_name: str = Field(default="influxdb", description="Registry name of the default data source")

    # Connector Defaults
    query_limit: int = Field(default=10000, description="Maximum points expected per series")
    strict_value_types: bool = Field(default=False, description="Raise on item value types without a table")

    # Application Settings
    log_level: str = Field(default="INFO", description="Logging level")

    def get_connector_defaults(self) -> dict:
        """Return defaults applied to new connectors."""
        return {
            "limit": self.query_limit,
            "strict_value_types": self.strict_value_types,
        }


# Global configuration instance
app_settings = AppSettings()
