"""Tests for domain models."""

import pytest

from lazi.domain.models import (
    BatchResult,
    BatchStartPayload,
    CustomNode,
    EventEndPayload,
    EventFamily,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    Node,
    OperationKind,
    RecordKind,
    SinglePayload,
    WorkflowGraph,
)
from lazi.domain.scripts import ScriptType, comment, render_section, script_header


def _record(log_id, kind, payload, parent_id=None):
    return LogRecord(log_id, "2025-03-01T12:00:00+00:00", kind, payload, parent_id)


class TestRecordKind:
    """Tests for the RecordKind discriminator."""

    def test_families(self):
        assert RecordKind.SINGLE.family is None
        assert RecordKind.EVENT_STEP.family == "event"
        assert RecordKind.BATCH_END.family == "batch"

    def test_roles(self):
        assert RecordKind.EVENT_START.is_start
        assert RecordKind.BATCH_STEP.is_step
        assert RecordKind.EVENT_END.is_end
        assert not RecordKind.SINGLE.is_start

    def test_all_kinds_accounted(self):
        assert len(RecordKind) == 7


class TestLogRecord:
    """Tests for LogRecord."""

    def test_record_immutable(self):
        record = _record(1, RecordKind.SINGLE, SinglePayload("ls", "ls -la", 0))
        with pytest.raises(AttributeError):
            record.log_id = 2

    def test_name_follows_payload(self):
        assert _record(1, RecordKind.SINGLE, SinglePayload("ls", "ls -la", 0)).name == "ls"
        assert _record(2, RecordKind.EVENT_START, EventStartPayload("deploy", "bash", 2)).name == "deploy"
        assert _record(3, RecordKind.EVENT_STEP, EventStepPayload(1, "Build")).name == "Build"
        assert _record(4, RecordKind.BATCH_START, BatchStartPayload(3)).name == "Batch Execution"

    def test_raw_text_not_compared(self):
        payload = SinglePayload("ls", "ls", 0)
        a = LogRecord(1, "t", RecordKind.SINGLE, payload, raw="x")
        b = LogRecord(1, "t", RecordKind.SINGLE, payload, raw="y")
        assert a == b


class TestEventFamily:
    """Tests for EventFamily projections."""

    def test_steps_sorted_and_end_found(self):
        start = _record(10, RecordKind.EVENT_START, EventStartPayload("wf", "bash", 2))
        step2 = _record(12, RecordKind.EVENT_STEP, EventStepPayload(2, "B"), 10)
        step1 = _record(11, RecordKind.EVENT_STEP, EventStepPayload(1, "A"), 10)
        end = _record(13, RecordKind.EVENT_END, EventEndPayload("wf", 0, 1.5), 10)
        family = EventFamily(start, (step2, step1, end))

        assert [s.log_id for s in family.steps] == [11, 12]
        assert family.end is end
        assert not family.is_open
        assert family.records[0] is start

    def test_missing_end_means_open(self):
        start = _record(10, RecordKind.EVENT_START, EventStartPayload("wf", "bash", 1))
        family = EventFamily(start, ())
        assert family.end is None
        assert family.is_open


class TestBatchResult:
    def test_exit_code_reflects_failures(self):
        assert BatchResult(1, 3, 3, 0, 0.1).exit_code == 0
        assert BatchResult(1, 3, 2, 1, 0.1).exit_code == 1


class TestNode:
    """Tests for operation reference classification."""

    @pytest.mark.parametrize(
        ("operation", "kind"),
        [
            ("cmdregistry-log", OperationKind.LOG),
            ("lazi-log", OperationKind.LOG),
            ("lazi-build", OperationKind.COMMAND),
            ("custom-retry", OperationKind.CUSTOM),
        ],
    )
    def test_operation_kind(self, operation, kind):
        assert Node("n1", operation).operation_kind is kind

    def test_command_name_strips_prefix(self):
        assert Node("n1", "lazi-deploy").command_name == "deploy"

    def test_display_name_falls_back_to_operation(self):
        assert Node("n1", "lazi-deploy").display_name == "lazi-deploy"
        assert Node("n1", "lazi-deploy", label="Deploy").display_name == "Deploy"

    def test_graph_lookup(self):
        graph = WorkflowGraph("wf", nodes=(Node("a", "x"), Node("b", "y")))
        assert graph.node("b").operation == "y"
        assert graph.node("zzz") is None


class TestCustomNode:
    def test_generator_for_script_type(self):
        node = CustomNode("custom-echo", "Echo", generators={"bash": "echo {{msg}}"})
        assert node.generator_for("bash") == "echo {{msg}}"
        assert node.generator_for("powershell") is None


class TestScripts:
    """Tests for script types and framing text."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("bash", ScriptType.BASH), ("PowerShell", ScriptType.POWERSHELL), ("ps1", ScriptType.POWERSHELL), ("sh", ScriptType.BASH)],
    )
    def test_parse(self, value, expected):
        assert ScriptType.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown script type"):
            ScriptType.parse("fish")

    def test_extensions(self):
        assert ScriptType.BASH.extension == ".sh"
        assert ScriptType.POWERSHELL.extension == ".ps1"

    def test_bash_header(self):
        header = script_header(ScriptType.BASH, ["Workflow: deploy"])
        assert header.startswith("#!/bin/bash\n")
        assert "set -e\n" in header
        assert "# Workflow: deploy\n" in header
        assert header.endswith("\n\n")

    def test_powershell_header_has_no_shebang(self):
        header = script_header(ScriptType.POWERSHELL)
        assert header.startswith("# PowerShell Script\n")
        assert "#!" not in header

    def test_render_section(self):
        assert render_section("Build", "make", "n1") == "# Build\n# Step: n1\nmake\n\n"

    def test_comment_prefixes_each_line(self):
        assert comment("a\nb") == "# a\n# b"
