"""Tests for the manifest generator stage."""

import sys
from pathlib import Path

import pytest

from linkerd_link.config.models import GeneratorConfig
from linkerd_link.constants import INTERNAL_INVOKE_FLAG
from linkerd_link.exceptions import SubprocessError
from linkerd_link.host_log import ResourceLog, Severity
from linkerd_link.pipeline.generator import ManifestGenerator, run_generator_as_child


class TestBuildArgv:
    def test_direct(self):
        generator = ManifestGenerator(GeneratorConfig(command="linkerd multicluster"))

        assert generator.build_argv(["link"]) == ["linkerd", "multicluster", "link"]

    def test_isolated(self):
        """Isolation re-invokes this package with the wrapper flag."""
        generator = ManifestGenerator(
            GeneratorConfig(command="linkerd multicluster", isolate=True)
        )

        assert generator.build_argv(["link"]) == [
            sys.executable,
            "-m",
            "linkerd_link",
            INTERNAL_INVOKE_FLAG,
            "linkerd",
            "multicluster",
            "link",
        ]


class TestManifestGenerator:
    """Tests for ManifestGenerator against a fake generator tool."""

    @pytest.mark.asyncio
    async def test_link_manifest(self, fake_tools, recording_sink, link_urn, manifest, tmp_path):
        generator = ManifestGenerator(
            GeneratorConfig(command=fake_tools.generator(stderr="contacting cluster\n"))
        )
        kubeconfig = tmp_path / "kubeconfig"
        kubeconfig.write_text('{"server":"https://a"}')

        result = await generator.link_manifest(
            kubeconfig, "east", ResourceLog(recording_sink, link_urn)
        )

        assert result == manifest
        (call,) = fake_tools.calls()
        assert call["argv"] == ["--kubeconfig", str(kubeconfig), "link", "--cluster-name", "east"]
        assert recording_sink.lines == [(Severity.WARNING, link_urn, "contacting cluster")]

    @pytest.mark.asyncio
    async def test_default_control_plane_version(
        self, fake_tools, recording_sink, link_urn, tmp_path
    ):
        generator = ManifestGenerator(
            GeneratorConfig(
                command=fake_tools.generator(),
                default_control_plane_version="stable-2.11.1",
            )
        )
        log = ResourceLog(recording_sink, link_urn)
        kubeconfig = tmp_path / "kubeconfig"
        kubeconfig.write_text("{}")

        await generator.link_manifest(kubeconfig, "east", log)
        await generator.link_manifest(kubeconfig, "east", log, control_plane_version="edge-22.1.1")

        first, second = fake_tools.calls()
        assert first["argv"][-2:] == ["--control-plane-version", "stable-2.11.1"]
        assert second["argv"][-2:] == ["--control-plane-version", "edge-22.1.1"]

    @pytest.mark.asyncio
    async def test_unlink_manifest(self, fake_tools, recording_sink, link_urn, tmp_path):
        generator = ManifestGenerator(GeneratorConfig(command=fake_tools.generator()))
        kubeconfig = tmp_path / "kubeconfig"
        kubeconfig.write_text("{}")

        await generator.unlink_manifest(kubeconfig, "east", ResourceLog(recording_sink, link_urn))

        (call,) = fake_tools.calls()
        assert call["argv"][2:] == ["unlink", "--cluster-name", "east"]

    @pytest.mark.asyncio
    async def test_failure(self, fake_tools, recording_sink, link_urn, tmp_path):
        generator = ManifestGenerator(
            GeneratorConfig(command=fake_tools.generator(stderr="auth failed\n", exit_code=1))
        )
        kubeconfig = tmp_path / "kubeconfig"
        kubeconfig.write_text("{}")

        with pytest.raises(SubprocessError, match="creating link kubernetes config failed: auth failed"):
            await generator.link_manifest(kubeconfig, "east", ResourceLog(recording_sink, link_urn))

    @pytest.mark.asyncio
    async def test_manifest_not_utf8(self, recording_sink, link_urn, tmp_path):
        """Undecodable generator output is reported as a failure of the stage."""
        generator = ManifestGenerator(
            GeneratorConfig(
                command=[
                    sys.executable,
                    "-c",
                    "import sys; sys.stdout.buffer.write(b'kind: \\xff\\n')",
                ]
            )
        )
        kubeconfig = tmp_path / "kubeconfig"
        kubeconfig.write_text("{}")

        with pytest.raises(SubprocessError) as exc_info:
            await generator.link_manifest(kubeconfig, "east", ResourceLog(recording_sink, link_urn))

        err = exc_info.value
        assert err.error_code == "INVALID_OUTPUT"
        assert err.message == "creating link kubernetes config produced output that is not valid UTF-8"
        assert isinstance(err.__cause__, UnicodeDecodeError)


class TestRunGeneratorAsChild:
    """Tests for the wrapper-mode entry point."""

    def test_exit_status_is_forwarded(self):
        assert run_generator_as_child([sys.executable, "-c", "import sys; sys.exit(5)"]) == 5

    def test_missing_command(self, capsys):
        assert run_generator_as_child([]) == 2
        assert INTERNAL_INVOKE_FLAG in capsys.readouterr().err

    def test_missing_executable(self, capsys):
        assert run_generator_as_child([str(Path("/nonexistent/linkerd"))]) == 127
        assert "not found" in capsys.readouterr().err
