# arbmcp - Arbitrum MCP Tools
# ABOUTME: Version information
__version__ = "2.0.0"

# ABOUTME: Export core data models
from arbmcp.models import ConfigError, OperationResult, PlatformDescriptor, ServerEntry

__all__ = [
    "__version__",
    "ConfigError",
    "OperationResult",
    "PlatformDescriptor",
    "ServerEntry",
]
