import traceback
from datetime import datetime
from typing import Any

# =============================================================================
# Base Exception
# =============================================================================


class ToolBridgeError(Exception):
    """
    Base exception for every toolbridge failure.

    Carries:
    - a stable error code
    - structured details
    - suggestions for the caller
    - the underlying cause, if any
    """

    error_code: str = "TB_000"
    error_category: str = "general"
    severity: str = "error"  # debug, info, warning, error, critical

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []
        self.cause = cause
        self.recoverable = recoverable
        self.context = context or {}
        self.timestamp = datetime.now()
        self.traceback = traceback.format_exc() if cause else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the exception for logs and CLI output"""
        return {
            "error_code": self.error_code,
            "error_category": self.error_category,
            "severity": self.severity,
            "message": self.message,
            "details": self.details,
            "suggestions": self.suggestions,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.suggestions:
            parts.append(f"Suggestions: {', '.join(self.suggestions)}")
        return " | ".join(parts)


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(ToolBridgeError):
    """Invalid configuration"""

    error_code = "TB_CFG_001"
    error_category = "configuration"


class ConfigLoadError(ConfigurationError):
    """Configuration file could not be loaded"""

    error_code = "TB_CFG_002"

    def __init__(self, config_path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Failed to load configuration from '{config_path}'",
            details={"path": config_path, "reason": reason},
            suggestions=[
                "Check if the file exists",
                "Verify the file format (YAML/JSON)",
            ],
            **kwargs,
        )


# =============================================================================
# Tool Exceptions
# =============================================================================


class ToolError(ToolBridgeError):
    """Tool-level failure"""

    error_code = "TB_TOOL_001"
    error_category = "tool"


class ToolConstructionError(ToolError):
    """A tool could not be built from its definition"""

    error_code = "TB_TOOL_002"
    recoverable = False

    def __init__(self, reason: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Cannot construct tool: {reason}",
            details={"reason": reason},
            recoverable=False,
            **kwargs,
        )


class ToolInvocationError(ToolError):
    """The remote call failed"""

    error_code = "TB_TOOL_003"

    def __init__(self, tool_name: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Invocation of tool '{tool_name}' failed: {reason}",
            details={"tool": tool_name, "reason": reason},
            **kwargs,
        )
        self.tool_name = tool_name


class ResultParseError(ToolError):
    """The raw result is not a JSON value"""

    error_code = "TB_TOOL_004"

    def __init__(self, tool_name: str, raw: Any, reason: str, **kwargs: Any) -> None:
        preview = raw if isinstance(raw, str) else repr(raw)
        super().__init__(
            message=f"Result of tool '{tool_name}' could not be parsed: {reason}",
            details={"tool": tool_name, "reason": reason, "raw_preview": preview[:200]},
            suggestions=["Check that the remote tool returns JSON"],
            **kwargs,
        )
        self.tool_name = tool_name


# =============================================================================
# Transport Exceptions
# =============================================================================


class TransportError(ToolBridgeError):
    """The transport to the tool host is unusable"""

    error_code = "TB_TRN_001"
    error_category = "transport"

    def __init__(self, server_name: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Transport '{server_name}' unavailable: {reason}",
            details={"server": server_name, "reason": reason},
            **kwargs,
        )



class HttpStatusError(TransportError):
    """The HTTP endpoint answered with an unexpected status"""

    error_code = "TB_TRN_002"

    def __init__(self, server_name: str, status: int, body: str = "", **kwargs: Any) -> None:
        super().__init__(server_name, f"HTTP {status}", **kwargs)
        self.details["status"] = status
        if body:
            self.details["body_preview"] = body[:200]
        self.status = status
