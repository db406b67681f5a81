from typing import Literal, Optional

from pydantic import BaseModel


class ConnectorOptions(BaseModel):
    """Options a connector is created with."""
    datasource_id: Optional[str] = None
    datasource_name: Optional[str] = None
    limit: Optional[int] = None


class ConnectionStatus(BaseModel):
    """Result of a data source connectivity probe."""
    status: Literal["success", "error"]
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"
