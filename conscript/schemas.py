from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

class ContainerSummary(BaseModel):
    """Schema for one row of the container list."""
    model_config = ConfigDict(frozen=True)

    id: str
    full_id: str = Field(exclude=True)
    names: List[str]
    image: str
    status: str

class ContainerState(BaseModel):
    """Lifecycle state of a container, as reported by the engine."""
    model_config = ConfigDict(frozen=True)

    status: str
    running: bool = False
    paused: bool = False
    restarting: bool = False
    dead: bool = False
    error: str = ""
    exit_code: int = 0
    full_state: Dict[str, Any] = Field(default_factory=dict)

class ContainerDetails(BaseModel):
    """Schema for an inspected container."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    image: str
    state: ContainerState

class ContainerView(BaseModel):
    """
    Shaped inspection response.

    Every field is optional; only the fields that were set end up on the wire,
    under their capitalized alias.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="ID")
    name: Optional[str] = Field(None, alias="Name")
    image: Optional[str] = Field(None, alias="Image")
    status: Optional[str] = Field(None, alias="Status")
    running: Optional[bool] = Field(None, alias="Running")
    paused: Optional[bool] = Field(None, alias="Paused")
    restarting: Optional[bool] = Field(None, alias="Restarting")
    dead: Optional[bool] = Field(None, alias="Dead")
    error: Optional[str] = Field(None, alias="Error")
    exit_code: Optional[int] = Field(None, alias="ExitCode")
    state: Optional[Dict[str, Any]] = Field(None, alias="State")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)

class HealthVerdict(BaseModel):
    """HTTP status code and message derived from a lifecycle status."""
    model_config = ConfigDict(frozen=True)

    status_code: int
    message: str

    @property
    def healthy(self) -> bool:
        return 200 <= self.status_code < 300

class ServerInfo(BaseModel):
    """Schema for the /info endpoint."""
    application_version: str
    hostname: str
    uptime: str
    current_time: str
    runtime_version: str
    engine_version: Optional[str] = None

class RequestMeta(BaseModel):
    """Request-scoped metadata handed to every endpoint."""
    model_config = ConfigDict(frozen=True)

    server_address: str
    client_address: str
    path: str
