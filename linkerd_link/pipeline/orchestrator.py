"""Link pipeline orchestration.

Thin facade tying the two stages together: credential files are written for
the duration of the call only, stage A must finish before stage B starts
(stage B consumes stage A's output), and the first failing stage aborts the
pipeline.

Philosophy:
- Thin facade: credential scoping + stage ordering only
- Stage-specific logic lives in generator.py and applier.py
- No retries: the orchestration engine owns that decision
"""

import logging
from typing import Optional

from ..config.models import ProviderConfig
from ..credentials import kubeconfig_file
from ..host_log import ResourceLog
from .applier import ManifestApplier
from .generator import ManifestGenerator

logger = logging.getLogger(__name__)


class LinkPipeline:
    """Generates, applies and removes multicluster link manifests."""

    def __init__(
        self,
        generator: Optional[ManifestGenerator] = None,
        applier: Optional[ManifestApplier] = None,
    ):
        self.generator = generator or ManifestGenerator()
        self.applier = applier or ManifestApplier()

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "LinkPipeline":
        return cls(ManifestGenerator(config.generator), ManifestApplier(config.applier))

    async def link_clusters(
        self,
        source_kubeconfig: bytes,
        destination_kubeconfig: bytes,
        cluster_name: str,
        log: ResourceLog,
        control_plane_version: Optional[str] = None,
    ) -> str:
        """Link the source cluster into the destination cluster.

        Args:
            source_kubeconfig: Canonical kubeconfig of the cluster to mirror
            destination_kubeconfig: Canonical kubeconfig of the cluster receiving the link
            cluster_name: Name of the source cluster
            log: Attributed log handle for the resource
            control_plane_version: Optional version tag for the link components

        Returns:
            The applied manifest, to be recorded for later teardown

        Raises:
            SubprocessError: If either stage fails
        """
        with kubeconfig_file(source_kubeconfig) as source_path:
            manifest = await self.generator.link_manifest(
                source_path,
                cluster_name,
                log,
                control_plane_version=control_plane_version,
            )

        with kubeconfig_file(destination_kubeconfig) as destination_path:
            await self.applier.apply(destination_path, manifest, log)

        logger.info(f"Linked cluster {cluster_name}")
        return manifest

    async def unlink_clusters(
        self,
        destination_kubeconfig: bytes,
        cluster_name: str,
        log: ResourceLog,
        manifest: Optional[str] = None,
    ) -> None:
        """Remove a link from the destination cluster.

        The recorded manifest is replayed when there is one; otherwise an
        unlink manifest is generated against the destination cluster, where
        the link resources live.

        Raises:
            SubprocessError: If either stage fails
        """
        with kubeconfig_file(destination_kubeconfig) as destination_path:
            if not manifest:
                logger.info(
                    f"No recorded manifest for cluster {cluster_name}, regenerating"
                )
                manifest = await self.generator.unlink_manifest(
                    destination_path, cluster_name, log
                )
            await self.applier.delete(destination_path, manifest, log)

        logger.info(f"Unlinked cluster {cluster_name}")


__all__ = ["LinkPipeline"]
