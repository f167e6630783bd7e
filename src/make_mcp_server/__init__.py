"""Package initialization for make_mcp_server."""

__version__ = "0.1.0"
__description__ = "MCP server exposing on-demand Make scenarios as tools"

from .bridge import ScenarioBridge
from .config import Config, ConfigError
from .make_api import MakeClient
from .results import ResultsClient
from .schema_remapper import build_input_schema, remap

__all__ = [
    "Config",
    "ConfigError",
    "MakeClient",
    "ResultsClient",
    "ScenarioBridge",
    "build_input_schema",
    "remap",
]
