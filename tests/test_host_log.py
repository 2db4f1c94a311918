"""Tests for per-resource log attribution."""

from unittest.mock import MagicMock

from linkerd_link.host_log import ResourceLog, Severity, StructlogHostSink

URN = "urn:pulumi:dev::infra::linkerd-link:index:Link::east-into-west"


class TestResourceLog:
    def test_lines_are_attributed(self):
        sink = MagicMock()
        log = ResourceLog(sink, URN)

        log.info("secret/link created\n")
        log.warning("deprecated flag\r\n")

        sink.log.assert_any_call(Severity.INFO, URN, "secret/link created")
        sink.log.assert_any_call(Severity.WARNING, URN, "deprecated flag")
        assert sink.log.call_count == 2

    def test_blank_lines_are_dropped(self):
        sink = MagicMock()
        log = ResourceLog(sink, URN)

        log.info("\n")
        log.warning("   \n")

        sink.log.assert_not_called()


class TestStructlogHostSink:
    def test_binds_urn_and_uses_level_for_severity(self):
        sink = StructlogHostSink()
        sink._logger = MagicMock()
        bound = sink._logger.bind.return_value

        sink.log(Severity.WARNING, URN, "careful")

        sink._logger.bind.assert_called_once_with(urn=URN)
        bound.warning.assert_called_once_with("careful")
        bound.info.assert_not_called()

    def test_info_line(self):
        sink = StructlogHostSink()
        sink._logger = MagicMock()
        bound = sink._logger.bind.return_value

        sink.log(Severity.INFO, URN, "linking")

        sink._logger.bind.assert_called_once_with(urn=URN)
        bound.info.assert_called_once_with("linking")
        bound.warning.assert_not_called()
