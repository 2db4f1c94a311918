"""Lifecycle engine for the Link resource.

Translates the resource RPC verbs into pipeline runs:

- Create: generate the link manifest from the source cluster and apply it
  to the destination cluster; the manifest is recorded as an output.
- Delete: remove the recorded (or regenerated) manifest from the
  destination cluster.
- Update: there is no in-place update of a link, so an update is a Delete
  of the old state followed by a Create of the new one. The two halves are
  not atomic; a failure after the delete leaves no link at all and is
  reported as such.
- Read: identity, the clusters are not queried.

The provider keeps no per-resource state: everything an operation needs
lives in its request and in locals, so independent resources can be handled
concurrently.
"""

from typing import Any, Dict, Optional

import structlog

from .config.models import ProviderConfig
from .constants import PLACEHOLDER_ID, RESOURCE_TYPE
from .diff import diff_properties
from .exceptions import LinkProviderError, UnknownResourceTypeError, UpdateError
from .host_log import HostLogSink, ResourceLog, StructlogHostSink
from .models import (
    CheckFailure,
    CheckRequest,
    CheckResponse,
    ConfigureRequest,
    CreateRequest,
    CreateResponse,
    DeleteRequest,
    DiffRequest,
    DiffResponse,
    Empty,
    PluginInfo,
    ReadRequest,
    ReadResponse,
    SchemaResponse,
    UpdateRequest,
    UpdateResponse,
)
from .pipeline.orchestrator import LinkPipeline
from .properties import marshal_properties, resource_type, unmarshal_properties
from .resource import LinkInputs, LinkState, check_inputs
from .schema import package_schema_json
from .version import __version__

logger = structlog.get_logger(__name__)


class LinkProvider:
    """Implements Check, Diff, Create, Read, Update and Delete for links."""

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        log_sink: Optional[HostLogSink] = None,
        pipeline: Optional[LinkPipeline] = None,
    ) -> None:
        """
        Args:
            config: Provider configuration (defaults apply when omitted)
            log_sink: Destination of attributed tool output
            pipeline: Pipeline to run; built from ``config`` when omitted
        """
        self.config = config or ProviderConfig()
        self.log_sink = log_sink or StructlogHostSink()
        self.pipeline = pipeline or LinkPipeline.from_config(self.config)

    def _check_type(self, urn: str) -> None:
        ty = resource_type(urn)
        if ty != RESOURCE_TYPE:
            raise UnknownResourceTypeError(
                f"Unknown resource type '{ty}'", resource_type=ty
            )

    def _resource_log(self, urn: str) -> ResourceLog:
        return ResourceLog(self.log_sink, urn)

    # Provider-level verbs. The provider takes no configuration of its own.

    async def check_config(self, req: CheckRequest) -> CheckResponse:
        return CheckResponse(inputs=req.news)

    async def diff_config(self, req: DiffRequest) -> DiffResponse:
        return DiffResponse()

    async def configure(self, req: ConfigureRequest) -> Empty:
        return Empty()

    async def cancel(self) -> Empty:
        return Empty()

    async def get_plugin_info(self) -> PluginInfo:
        return PluginInfo(version=__version__)

    async def get_schema(self) -> SchemaResponse:
        return SchemaResponse(schema=package_schema_json(__version__))

    # Resource verbs.

    async def check(self, req: CheckRequest) -> CheckResponse:
        """Validate declared inputs. Never starts a process."""
        self._check_type(req.urn)
        news, _ = unmarshal_properties(req.news)
        failures = [CheckFailure(**f) for f in check_inputs(news)]
        if failures:
            logger.info(
                "check found invalid inputs",
                urn=req.urn,
                properties=[f.property for f in failures],
            )
        return CheckResponse(inputs=req.news, failures=failures)

    async def diff(self, req: DiffRequest) -> DiffResponse:
        """Report which declared properties differ from the recorded ones."""
        self._check_type(req.urn)
        olds, _ = unmarshal_properties(req.olds)
        news, _ = unmarshal_properties(req.news)
        result = diff_properties(olds, news)
        logger.debug(
            "diff computed",
            urn=req.urn,
            changes=result.changes.value,
            changed=sorted(result.detailed_diff),
        )
        return DiffResponse(
            changes=result.changes,
            detailed_diff=result.detailed_diff,
            has_detailed_diff=result.has_detailed_diff,
        )

    async def create(self, req: CreateRequest) -> CreateResponse:
        """Generate and apply the link manifest."""
        self._check_type(req.urn)
        props, secret_keys = unmarshal_properties(req.properties)
        inputs = LinkInputs.from_properties(props, secret_keys)
        outputs = await self._link(req.urn, inputs)
        return CreateResponse(id=PLACEHOLDER_ID, properties=outputs)

    async def read(self, req: ReadRequest) -> ReadResponse:
        self._check_type(req.urn)
        return ReadResponse(id=req.id, properties=req.properties)

    async def update(self, req: UpdateRequest) -> UpdateResponse:
        """Tear down the old link, then create the new one."""
        self._check_type(req.urn)
        olds, _ = unmarshal_properties(req.olds)
        news, secret_keys = unmarshal_properties(req.news)
        # Both sides are validated before anything is torn down.
        state = LinkState.from_properties(olds)
        inputs = LinkInputs.from_properties(news, secret_keys)

        try:
            await self._unlink(req.urn, state)
        except LinkProviderError as e:
            raise UpdateError(
                f"could not remove old resources: {e.message}",
                phase="delete",
                cause=e,
            ) from e

        try:
            outputs = await self._link(req.urn, inputs)
        except LinkProviderError as e:
            logger.error(
                "update left resource without a link", urn=req.urn, error=str(e)
            )
            raise UpdateError(
                "old link was removed but the new link could not be created: "
                f"{e.message}",
                phase="create",
                inconsistent=True,
                cause=e,
            ) from e
        return UpdateResponse(properties=outputs)

    async def delete(self, req: DeleteRequest) -> Empty:
        """Remove the link from the destination cluster."""
        self._check_type(req.urn)
        props, _ = unmarshal_properties(req.properties)
        await self._unlink(req.urn, LinkState.from_properties(props))
        return Empty()

    async def _link(self, urn: str, inputs: LinkInputs) -> Dict[str, Any]:
        log = logger.bind(urn=urn, cluster_name=inputs.cluster_name)
        log.info("linking cluster")
        manifest = await self.pipeline.link_clusters(
            inputs.source_kubeconfig,
            inputs.destination_kubeconfig,
            inputs.cluster_name,
            self._resource_log(urn),
            control_plane_version=inputs.control_plane_version,
        )
        log.info("cluster linked")
        return marshal_properties(inputs.outputs(manifest), inputs.output_secret_keys())

    async def _unlink(self, urn: str, state: LinkState) -> None:
        log = logger.bind(urn=urn, cluster_name=state.cluster_name)
        log.info("unlinking cluster", replay=state.manifest is not None)
        await self.pipeline.unlink_clusters(
            state.destination_kubeconfig,
            state.cluster_name,
            self._resource_log(urn),
            manifest=state.manifest,
        )
        log.info("cluster unlinked")


__all__ = ["LinkProvider"]
