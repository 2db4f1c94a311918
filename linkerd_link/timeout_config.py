"""
Centralized timeout configuration for the external pipeline tools.

Each stage of the link pipeline runs an external executable that could hang
indefinitely (an unreachable API server, a stuck admission webhook). These
values bound how long a single stage may run before the child is killed.
They are not a retry policy: the orchestration engine decides what to do with
the resulting failure.

Usage:
    from linkerd_link.timeout_config import Timeouts

    await run_streaming(argv, timeout=Timeouts.GENERATE)

Environment Variables:
    - LINKERD_LINK_TIMEOUT_GENERATE: Manifest generation (default: 120s)
    - LINKERD_LINK_TIMEOUT_APPLY: kubectl apply (default: 600s)
    - LINKERD_LINK_TIMEOUT_DELETE: kubectl delete (default: 600s)
"""

import logging
import os
from typing import Final, List, Optional, Union

logger = logging.getLogger(__name__)


def _get_timeout(env_var: str, default: int) -> int:
    """Get timeout value from environment variable or use default.

    Args:
        env_var: Environment variable name
        default: Default timeout in seconds

    Returns:
        Timeout value in seconds
    """
    value = os.environ.get(env_var)
    if value is not None:
        try:
            timeout = int(value)
            if timeout <= 0:
                logger.warning(
                    f"Invalid timeout value for {env_var}: {value}. "
                    f"Must be positive. Using default: {default}s"
                )
                return default
            return timeout
        except ValueError:
            logger.warning(
                f"Invalid timeout value for {env_var}: {value}. "
                f"Must be integer. Using default: {default}s"
            )
            return default
    return default


class Timeouts:
    """Timeout constants for the pipeline stages, in seconds."""

    GENERATE: Final[int] = _get_timeout("LINKERD_LINK_TIMEOUT_GENERATE", 120)
    APPLY: Final[int] = _get_timeout("LINKERD_LINK_TIMEOUT_APPLY", 600)
    DELETE: Final[int] = _get_timeout("LINKERD_LINK_TIMEOUT_DELETE", 600)


def log_timeout_event(
    operation: str,
    timeout_value: Optional[float],
    command: Union[str, List[str], None] = None,
    level: str = "warning",
) -> None:
    """Log a timeout event with consistent formatting.

    Args:
        operation: Name of the operation that timed out
        timeout_value: Timeout value that was exceeded
        command: Optional command that timed out
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level, logger.warning)
    cmd_str = ""
    if command:
        cmd_str = " ".join(command) if isinstance(command, list) else command
        if len(cmd_str) > 100:
            cmd_str = cmd_str[:97] + "..."
        cmd_str = f" - command: '{cmd_str}'"

    log_func(
        f"Operation '{operation}' timed out after {timeout_value} seconds{cmd_str}"
    )
