"""Manifest application and removal (stage B).

Streams a manifest into the applier tool (``kubectl`` by default) with
``apply -f -`` or ``delete -f -``. Stdout lines are relayed to the host as
info, stderr lines as warnings, both while the tool runs.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..config.models import ApplierConfig
from ..host_log import ResourceLog
from ..timeout_config import Timeouts
from .process import ProcessResult, run_streaming

logger = logging.getLogger(__name__)


class ManifestApplier:
    def __init__(self, config: Optional[ApplierConfig] = None):
        self.config = config or ApplierConfig()

    def build_argv(self, kubeconfig_path: Path, action: str) -> List[str]:
        return [
            *self.config.command,
            "--kubeconfig",
            str(kubeconfig_path),
            action,
            "-f",
            "-",
        ]

    async def apply(
        self, kubeconfig_path: Path, manifest: str, log: ResourceLog
    ) -> ProcessResult:
        """Apply ``manifest`` to the cluster behind ``kubeconfig_path``."""
        logger.info("Applying link manifest")
        return await run_streaming(
            self.build_argv(kubeconfig_path, "apply"),
            operation="applying config with kubectl",
            stdin=manifest.encode("utf-8"),
            on_stdout=log.info,
            on_stderr=log.warning,
            timeout=Timeouts.APPLY,
        )

    async def delete(
        self, kubeconfig_path: Path, manifest: str, log: ResourceLog
    ) -> ProcessResult:
        """Remove the resources listed in ``manifest`` from the cluster."""
        logger.info("Removing link manifest")
        return await run_streaming(
            self.build_argv(kubeconfig_path, "delete"),
            operation="removing config with kubectl",
            stdin=manifest.encode("utf-8"),
            on_stdout=log.info,
            on_stderr=log.warning,
            timeout=Timeouts.DELETE,
        )


__all__ = ["ManifestApplier"]
