"""Data shapes exchanged with the Make API, the Results API and MCP clients."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ON_DEMAND = "on-demand"


class Scheduling(BaseModel):
    """Scheduling descriptor of a scenario."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Scheduling type, e.g. on-demand, indefinitely")


class Scenario(BaseModel):
    """A Make scenario as returned by the list endpoint."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    description: Optional[str] = None
    scheduling: Scheduling

    @property
    def is_on_demand(self) -> bool:
        return self.scheduling.type == ON_DEMAND


class InterfaceField(BaseModel):
    """One node of a scenario's interface descriptor tree.

    Composite nodes (``collection``, ``array``) carry child nodes in
    ``spec``. An array's ``spec`` is either a single element node or a list
    of fields describing object elements. ``spec`` is kept as raw JSON and
    turned into nodes one level at a time by the schema remapper, so
    validation never recurses into the tree.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    type: Optional[str] = None
    label: Optional[str] = None
    help: Optional[str] = None
    required: bool = False
    default: Any = None
    options: Any = None
    spec: Any = None


class ScenarioInterface(BaseModel):
    """Declared inputs of a scenario."""

    input: List[InterfaceField] = Field(default_factory=list)


class ScenarioRun(BaseModel):
    """Response of the scenario run endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    execution_id: str = Field(..., alias="executionId")
    status: Optional[Any] = None


class ToolDescriptor(BaseModel):
    """A scenario exposed as an MCP tool."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(..., alias="inputSchema")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ResultPayload(BaseModel):
    """Body of a successful Results API lookup."""

    model_config = ConfigDict(extra="allow")

    output: Any = None
    error: Optional[str] = None


class ExecutionState(str, Enum):
    TRIGGERED = "triggered"
    RETRIEVED = "retrieved"
    FAILED = "failed"


class Execution(BaseModel):
    """One scenario run, tracked for the duration of a single tool call."""

    scenario_id: int
    execution_id: str
    status: Optional[Any] = None
    state: ExecutionState = ExecutionState.TRIGGERED


class ToolCallResult(BaseModel):
    """Outcome of a successful tool invocation."""

    tool_result: str
    execution: Execution
