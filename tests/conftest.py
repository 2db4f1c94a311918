"""Shared fixtures for provider tests.

Fake generator and applier tools are small Python scripts that record how
they were called (argv, stdin, and the contents of the kubeconfig file they
were pointed at) and then print canned output.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from linkerd_link.config.models import ApplierConfig, GeneratorConfig, ProviderConfig
from linkerd_link.host_log import Severity
from linkerd_link.properties import wrap_rpc_secret

LINK_URN = "urn:pulumi:dev::infra::linkerd-link:index:Link::east-into-west"
OTHER_URN = "urn:pulumi:dev::infra::kubernetes:core/v1:Secret::not-a-link"

SOURCE_KUBECONFIG = {"server": "https://a"}
DESTINATION_KUBECONFIG = {"server": "https://b"}
MANIFEST = "---\nkind: Secret\n"

_TOOL_TEMPLATE = """\
import json
import sys

argv = sys.argv[1:]
kubeconfig_path = None
kubeconfig = None
if "--kubeconfig" in argv:
    kubeconfig_path = argv[argv.index("--kubeconfig") + 1]
    with open(kubeconfig_path) as f:
        kubeconfig = f.read()
stdin = sys.stdin.read() if sys.stdin is not None else ""
with open({record!r}, "a") as f:
    f.write(json.dumps({{
        "tool": {name!r},
        "argv": argv,
        "kubeconfig_path": kubeconfig_path,
        "kubeconfig": kubeconfig,
        "stdin": stdin,
    }}) + "\\n")
sys.stdout.write({stdout!r})
sys.stdout.flush()
sys.stderr.write({stderr!r})
sys.stderr.flush()
sys.exit({exit_code!r})
"""


class RecordingSink:
    """Host log sink that keeps every attributed line."""

    def __init__(self) -> None:
        self.lines: List[Tuple[Severity, str, str]] = []

    def log(self, severity: Severity, urn: str, message: str) -> None:
        self.lines.append((severity, urn, message))

    def messages(self, severity: Optional[Severity] = None) -> List[str]:
        return [m for s, _, m in self.lines if severity is None or s is severity]


class FakeTools:
    """Writes fake generator/applier scripts and reads back their call records."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.record_file = root / "calls.jsonl"

    def _write(self, name: str, stdout: str, stderr: str, exit_code: int) -> List[str]:
        script = self.root / f"fake_{name}.py"
        script.write_text(
            _TOOL_TEMPLATE.format(
                record=str(self.record_file),
                name=name,
                stdout=stdout,
                stderr=stderr,
                exit_code=exit_code,
            )
        )
        return [sys.executable, str(script)]

    def generator(self, stdout: str = MANIFEST, stderr: str = "", exit_code: int = 0) -> List[str]:
        return self._write("generator", stdout, stderr, exit_code)

    def applier(self, stdout: str = "", stderr: str = "", exit_code: int = 0) -> List[str]:
        return self._write("applier", stdout, stderr, exit_code)

    def calls(self) -> List[Dict[str, Any]]:
        if not self.record_file.exists():
            return []
        return [json.loads(line) for line in self.record_file.read_text().splitlines()]

    def config(
        self,
        generator: Optional[List[str]] = None,
        applier: Optional[List[str]] = None,
        isolate: bool = False,
    ) -> ProviderConfig:
        return ProviderConfig(
            generator=GeneratorConfig(
                command=generator or self.generator(), isolate=isolate
            ),
            applier=ApplierConfig(command=applier or self.applier()),
        )


@pytest.fixture
def fake_tools(tmp_path) -> FakeTools:
    return FakeTools(tmp_path)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def link_inputs() -> Dict[str, Any]:
    """Declared inputs as they arrive on the wire."""
    return {
        "from_cluster_kubeconfig": wrap_rpc_secret(dict(SOURCE_KUBECONFIG)),
        "from_cluster_name": "east",
        "to_cluster_kubeconfig": dict(DESTINATION_KUBECONFIG),
    }


@pytest.fixture
def recorded_outputs() -> Dict[str, Any]:
    """Recorded properties of an existing link."""
    return {
        "from_cluster_kubeconfig": wrap_rpc_secret('{"server":"https://a"}'),
        "from_cluster_name": "east",
        "to_cluster_kubeconfig": '{"server":"https://b"}',
        "config_group_yaml": wrap_rpc_secret(MANIFEST),
    }


@pytest.fixture
def link_urn() -> str:
    return LINK_URN


@pytest.fixture
def other_urn() -> str:
    return OTHER_URN


@pytest.fixture
def manifest() -> str:
    return MANIFEST
