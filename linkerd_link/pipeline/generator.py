"""Manifest generation (stage A).

The generator tool prints the multicluster link manifest on its standard
output and its diagnostics on standard error. Stdout is captured as the
manifest; stderr is relayed to the host as warnings while the tool runs.

Two invocation strategies exist:
- direct: spawn the configured generator command with piped stdout
- isolated: re-invoke this provider with the private wrapper flag, the
  child then runs the generator with its real stdout, which is our pipe.
  This is for generator builds that insist on writing to the process-wide
  standard output rather than a stream they are given.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from ..config.models import GeneratorConfig
from ..constants import INTERNAL_INVOKE_FLAG
from ..exceptions import SubprocessError
from ..host_log import ResourceLog
from ..timeout_config import Timeouts
from .process import run_streaming

logger = logging.getLogger(__name__)


class ManifestGenerator:
    """Runs the manifest generator and returns the manifest it prints."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()

    def build_argv(self, args: List[str]) -> List[str]:
        """Full command line for one generator run."""
        if self.config.isolate:
            return [
                sys.executable,
                "-m",
                "linkerd_link",
                INTERNAL_INVOKE_FLAG,
                *self.config.command,
                *args,
            ]
        return [*self.config.command, *args]

    async def _run(self, args: List[str], log: ResourceLog, operation: str) -> str:
        result = await run_streaming(
            self.build_argv(args),
            operation=operation,
            capture_stdout=True,
            on_stderr=log.warning,
            timeout=Timeouts.GENERATE,
        )
        try:
            return result.stdout_text
        except UnicodeDecodeError as e:
            raise SubprocessError(
                f"{operation} produced output that is not valid UTF-8",
                command=result.argv,
                error_code="INVALID_OUTPUT",
                cause=e,
            ) from e

    async def link_manifest(
        self,
        kubeconfig_path: Path,
        cluster_name: str,
        log: ResourceLog,
        control_plane_version: Optional[str] = None,
    ) -> str:
        """Generate the manifest that links ``cluster_name`` into another cluster.

        Args:
            kubeconfig_path: Credential file for the cluster being mirrored
            cluster_name: Name the mirrored cluster is known by
            log: Attributed log handle for the resource
            control_plane_version: Optional version tag for the link components
        """
        version = control_plane_version or self.config.default_control_plane_version
        args = [
            "--kubeconfig",
            str(kubeconfig_path),
            "link",
            "--cluster-name",
            cluster_name,
        ]
        if version:
            args += ["--control-plane-version", version]
        logger.info(f"Generating link manifest for cluster {cluster_name}")
        return await self._run(args, log, "creating link kubernetes config")

    async def unlink_manifest(
        self, kubeconfig_path: Path, cluster_name: str, log: ResourceLog
    ) -> str:
        """Generate the manifest listing the link resources of ``cluster_name``."""
        args = [
            "--kubeconfig",
            str(kubeconfig_path),
            "unlink",
            "--cluster-name",
            cluster_name,
        ]
        logger.info(f"Generating unlink manifest for cluster {cluster_name}")
        return await self._run(args, log, "creating unlink kubernetes config")


def run_generator_as_child(argv: List[str]) -> int:
    """Entry point of the isolated wrapper process.

    ``argv`` is the generator command followed by its arguments. The
    generator inherits this process's standard streams, so its stdout lands
    in the pipe held by the parent provider.

    Returns:
        The generator's exit status
    """
    if not argv:
        print(f"{INTERNAL_INVOKE_FLAG} requires a generator command", file=sys.stderr)
        return 2
    try:
        completed = subprocess.run(argv, check=False)
    except FileNotFoundError:
        print(f"generator executable '{argv[0]}' not found", file=sys.stderr)
        return 127
    return completed.returncode


__all__ = ["ManifestGenerator", "run_generator_as_child"]
