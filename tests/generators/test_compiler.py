"""Tests for generator classification, compilation and invocation."""

import pytest

from lazi.generators import GeneratorForm, classify, compile_generator, error_comment
from lazi.generators.compiler import DISABLED_MESSAGE
from lazi.generators.function import FunctionCompileError, compile_function


class TestClassify:
    @pytest.mark.parametrize(
        ("source", "form"),
        [
            ("lambda config, branches: 'x'", GeneratorForm.FUNCTION),
            ("def gen(config, branches):\n    return 'x'", GeneratorForm.FUNCTION),
            ("(config, branches) => `x`", GeneratorForm.FUNCTION),
            ("config => config.x", GeneratorForm.FUNCTION),
            ("{% if a %}x{% endif %}", GeneratorForm.SANDBOXED),
            ("{# note #}x", GeneratorForm.TEMPLATE),
            ('echo "${#items[@]}"', GeneratorForm.TEMPLATE),
            ("{% raw %}${#items[@]}{% endraw %}", GeneratorForm.SANDBOXED),
            ('Write-Host "{{message}}"', GeneratorForm.TEMPLATE),
        ],
    )
    def test_forms(self, source, form):
        assert classify(source) is form


class TestTemplateForm:
    def test_renders(self):
        generator = compile_generator('Write-Host "{{message}}"')
        assert generator.ok
        assert generator({"message": "hi"}) == 'Write-Host "hi"'

    def test_bash_length_expansion_is_plain_text(self):
        generator = compile_generator('echo "count: ${#items[@]} {{message}}"')
        assert generator.form is GeneratorForm.TEMPLATE
        assert generator({"message": "hi"}) == 'echo "count: ${#items[@]} hi"'

    def test_unparseable_jinja_falls_back_to_substitution(self):
        generator = compile_generator("{% if %} echo ${#var} {{message}}")
        assert generator.ok
        assert generator.form is GeneratorForm.TEMPLATE
        assert generator({"message": "hi"}) == "{% if %} echo ${#var} hi"


class TestSandboxedForm:
    """Tests for jinja2-rendered generators."""

    def test_conditional(self):
        generator = compile_generator(
            "{% if force %}Remove-Item -Force {{ path }}{% else %}Remove-Item {{ path }}{% endif %}"
        )
        assert generator({"force": True, "path": "C:/tmp"}) == "Remove-Item -Force C:/tmp"
        assert generator({"force": False, "path": "C:/tmp"}) == "Remove-Item C:/tmp"

    def test_branches_and_indent_filter(self):
        generator = compile_generator(
            "{% set body = branches['then'] %}if ok; then\n    {{ body | indent(4) }}\nfi"
        )
        assert generator({}, {"then": "echo a\necho b"}) == "if ok; then\n    echo a\n    echo b\nfi"

    def test_config_mapping_and_none(self):
        generator = compile_generator("{% for k in config %}{{ k }}={{ config[k] }};{% endfor %}")
        assert generator({"a": 1, "b": None}) == "a=1;b=;"

    def test_sandbox_violation_becomes_comment(self):
        generator = compile_generator("{% set c = config %}{{ c.__class__() }}")
        result = generator({"a": 1})
        assert result.startswith("# Error:")
        assert "\n" not in result


class TestFunctionForm:
    """Tests for opt-in executable generators."""

    def test_disabled_by_default(self):
        generator = compile_generator("lambda config, branches: 'x'")
        assert generator.form is GeneratorForm.FUNCTION
        assert generator({}) == DISABLED_MESSAGE

    def test_lambda(self):
        generator = compile_generator(
            "lambda config, branches: f\"Write-Host '{config['message']}'\"",
            allow_code=True,
        )
        assert generator({"message": "hi"}) == "Write-Host 'hi'"

    def test_def_with_branches(self):
        source = (
            "def gen(config, branches):\n"
            "    body = branches.get('loop', '')\n"
            "    return 'for i in 1 2; do\\n' + body + '\\ndone'\n"
        )
        generator = compile_generator(source, allow_code=True)
        assert generator({}, {"loop": "echo $i"}) == "for i in 1 2; do\necho $i\ndone"

    def test_none_result_is_empty(self):
        generator = compile_generator("lambda config, branches: None", allow_code=True)
        assert generator({}) == ""

    def test_throwing_function_yields_single_comment_line(self):
        generator = compile_generator(
            "lambda config, branches: config['missing']['deeper']",
            allow_code=True,
        )
        result = generator({})
        assert result.startswith("# Error:")
        assert "missing" in result
        assert "\n" not in result

    def test_javascript_arrow_rejected(self):
        generator = compile_generator("(config, branches) => `echo ${config.x}`", allow_code=True)
        assert not generator.ok
        assert "JavaScript" in generator({})

    def test_wrong_arity_rejected(self):
        generator = compile_generator("lambda config: 'x'", allow_code=True)
        assert generator({}).startswith("# Error compiling generator:")

    def test_restricted_builtins(self):
        generator = compile_generator("lambda config, branches: open('/etc/passwd').read()", allow_code=True)
        assert generator({}).startswith("# Error:")


class TestCompileFunction:
    def test_rejects_extra_statements(self):
        with pytest.raises(FunctionCompileError, match="exactly one function"):
            compile_function("x = 1\ndef gen(config, branches):\n    return ''")

    def test_rejects_bad_syntax(self):
        with pytest.raises(FunctionCompileError, match="invalid syntax"):
            compile_function("def gen(config, branches) return")


def test_error_comment_collapses_whitespace():
    assert error_comment("line one\n  line two") == "# Error: line one line two"
    assert error_comment("") == "# Error: Unknown error"


class TestReferencesBranch:
    """Which handles a compiled generator splices branch text into."""

    @pytest.mark.parametrize(
        ("source", "allow_code", "expected"),
        [
            ("if x; then\n  {{branches.true}}\nfi", False, True),
            ("if x; then\n  {{ branches.true-path }}\nfi", False, False),
            ("echo hello", False, False),
            ("{% if a %}{{ branches['true'] | indent(2) }}{% endif %}", False, True),
            ("{% if a %}{{ branches.truthy }}{% endif %}", False, False),
            ("lambda config, branches: branches.get('true', '')", True, True),
            ("lambda config, branches: branches.get('true', '')", False, False),
            ("lambda config, branches: 1 +", True, False),
        ],
    )
    def test_handle_true(self, source, allow_code, expected):
        generator = compile_generator(source, allow_code=allow_code)
        assert generator.references_branch("true") is expected
