"""Expose on-demand Make scenarios as MCP tools and invoke them.

Discovery lists a team's scenarios, keeps the on-demand ones and derives a
tool for each from its interface. Invocation triggers a run, then fetches
the output from the Results API by execution ID. Nothing is cached between
calls, and an execution ID lives only as long as the call that created it.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Union

import httpx

from .errors import AutomationAPIError, InternalError, InvalidRequest, ScenarioBridgeError
from .make_api import MakeClient
from .models import (
    Execution,
    ExecutionState,
    Scenario,
    ToolCallResult,
    ToolDescriptor,
)
from .results import ResultsClient, normalize_output
from .schema_remapper import build_input_schema

logger = logging.getLogger(__name__)

TOOL_PREFIX = "run_scenario_"
TOOL_NAME_PATTERN = re.compile(rf"^{TOOL_PREFIX}(\d+)$")


def tool_name_for(scenario_id: int) -> str:
    return f"{TOOL_PREFIX}{scenario_id}"


def parse_tool_name(name: str) -> int:
    """Scenario ID encoded in a tool name.

    Raises:
        InvalidRequest: the name is not a scenario tool name.
    """
    match = TOOL_NAME_PATTERN.match(name or "")
    if not match:
        raise InvalidRequest(f"Unknown tool: {name}")
    return int(match.group(1))


def _describe(error: BaseException) -> str:
    # httpx timeouts often stringify to an empty message
    return str(error) or type(error).__name__


def describe_scenario(scenario: Scenario) -> str:
    if scenario.description:
        return f"{scenario.name} ({scenario.description})"
    return scenario.name


class ScenarioBridge:
    """Translates between MCP tool calls and Make scenario runs."""

    def __init__(self, make: MakeClient, results: ResultsClient, team_id: int):
        self.make = make
        self.results = results
        self.team_id = team_id

    async def discover_tools(self) -> List[ToolDescriptor]:
        """Tools for every on-demand scenario whose interface could be mapped.

        Per-scenario failures are logged and the scenario is skipped.

        Raises:
            InternalError: listing scenarios failed.
        """
        logger.info("Received request to list tools (Make scenarios)...")
        try:
            scenarios = await self.make.list_scenarios(self.team_id)
        except (AutomationAPIError, httpx.HTTPError) as e:
            logger.error(f"Error listing Make scenarios: {e!r}")
            raise InternalError(f"Failed to list Make scenarios: {_describe(e)}") from e

        on_demand = [scenario for scenario in scenarios if scenario.is_on_demand]
        logger.info(f"Found {len(on_demand)} on-demand scenarios.")

        settled: List[Union[ToolDescriptor, BaseException]] = await asyncio.gather(
            *(self._scenario_tool(scenario) for scenario in on_demand),
            return_exceptions=True,
        )

        tools: List[ToolDescriptor] = []
        for scenario, outcome in zip(on_demand, settled):
            if isinstance(outcome, ToolDescriptor):
                tools.append(outcome)
            elif isinstance(outcome, Exception):
                logger.warning(
                    f"Error fetching interface for scenario {scenario.id}: {outcome!r}"
                )
            else:
                # CancelledError and friends are not isolated failures
                raise outcome
        logger.info(f"Returning {len(tools)} tools.")
        return tools

    async def _scenario_tool(self, scenario: Scenario) -> ToolDescriptor:
        interface = await self.make.get_interface(scenario.id)
        logger.debug(f"Processing interface for scenario ID {scenario.id}")
        return ToolDescriptor(
            name=tool_name_for(scenario.id),
            description=describe_scenario(scenario),
            input_schema=build_input_schema(interface.input),
        )

    async def invoke(
        self, tool_name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> ToolCallResult:
        """Run the scenario behind ``tool_name`` and return its output.

        Raises:
            InvalidRequest: ``tool_name`` is not a scenario tool.
            InternalError: the trigger or the result lookup failed. Messages
                raised after the trigger end with the execution ID.
        """
        scenario_id = parse_tool_name(tool_name)
        execution = await self._trigger(scenario_id, arguments)
        try:
            payload = await self.results.retrieve(execution.execution_id)
        except ScenarioBridgeError as e:
            execution.state = ExecutionState.FAILED
            logger.error(
                f"[{scenario_id} / {execution.execution_id}] Error during tool call "
                f"for {tool_name}: {e.message}"
            )
            raise InternalError(
                f"{e.message} (Make Execution ID: {execution.execution_id})"
            ) from e

        execution.state = ExecutionState.RETRIEVED
        logger.info(f"[{scenario_id} / {execution.execution_id}] Successfully retrieved results.")
        return ToolCallResult(tool_result=normalize_output(payload.output), execution=execution)

    async def _trigger(
        self, scenario_id: int, arguments: Optional[Dict[str, Any]]
    ) -> Execution:
        logger.info(f"[{scenario_id}] Calling Make API to run scenario...")
        try:
            run = await self.make.run_scenario(scenario_id, arguments)
        except (AutomationAPIError, httpx.HTTPError) as e:
            logger.error(f"[{scenario_id}] Make API run failed: {e!r}")
            raise InternalError(f"Failed to run Make scenario {scenario_id}: {_describe(e)}") from e

        # Output is unrecoverable from here on if the process dies; log the ID
        logger.info(f"[{scenario_id} / {run.execution_id}] Make API call successful.")
        return Execution(
            scenario_id=scenario_id,
            execution_id=run.execution_id,
            status=run.status,
        )
