"""Tests for plain placeholder templates."""

from lazi.generators.template import indent_continuation, render_template, stringify


class TestStringify:
    def test_values(self):
        assert stringify(None) == ""
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(3) == "3"
        assert stringify("x") == "x"


class TestRenderTemplate:
    """Tests for config and branch substitution."""

    def test_config_substitution(self):
        assert render_template('Write-Host "{{message}}"', {"message": "hi"}, {}) == 'Write-Host "hi"'

    def test_absent_key_is_empty(self):
        assert render_template('Write-Host "{{message}}"', {}, {}) == 'Write-Host ""'

    def test_whitespace_inside_braces(self):
        assert render_template("echo {{ name }}", {"name": "x"}, {}) == "echo x"

    def test_branch_reindented_to_placeholder_line(self):
        source = "if ($ok) {\n    {{branches.true-path}}\n}"
        branches = {"true-path": "Write-Host one\nWrite-Host two"}
        assert render_template(source, {}, branches) == (
            "if ($ok) {\n    Write-Host one\n    Write-Host two\n}"
        )

    def test_absent_branch_is_empty(self):
        assert render_template("  {{branches.none}}", {}, {}) == "  "

    def test_single_pass(self):
        result = render_template("{{a}}", {"a": "{{b}}", "b": "nope"}, {})
        assert result == "{{b}}"

    def test_boolean_config(self):
        assert render_template("-Force:${{force}}", {"force": True}, {}) == "-Force:$true"


def test_indent_continuation_leaves_first_line():
    assert indent_continuation("a\nb\nc", "  ") == "a\n  b\n  c"
