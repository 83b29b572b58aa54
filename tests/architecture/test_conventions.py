"""
Convention Enforcement Tests.

Permanent tests that catch anti-patterns which import-based layer rules
cannot detect: frozen dataclass conventions, immutable collections,
silent exception swallowing, and interface contracts.
"""

import ast
import inspect
from pathlib import Path

import pytest

pytestmark = pytest.mark.architecture

SRC_ROOT = Path(__file__).parent.parent.parent / "src" / "lazi"


def _dataclass_info(tree: ast.AST) -> list[tuple[ast.ClassDef, bool]]:
    """(class node, is_frozen) for each @dataclass in a parsed module."""
    results = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.ClassDef):
            continue
        for decorator in node.decorator_list:
            if isinstance(decorator, ast.Name) and decorator.id == "dataclass":
                results.append((node, False))
            elif (
                isinstance(decorator, ast.Call)
                and isinstance(decorator.func, ast.Name)
                and decorator.func.id == "dataclass"
            ):
                frozen = any(
                    kw.arg == "frozen"
                    and isinstance(kw.value, ast.Constant)
                    and kw.value.value is True
                    for kw in decorator.keywords
                )
                results.append((node, frozen))
    return results


class TestFrozenDataclassConvention:
    """All domain models are immutable values."""

    def test_domain_models_are_frozen(self):
        tree = ast.parse((SRC_ROOT / "domain" / "models.py").read_text(encoding="utf-8"))
        violations = [node.name for node, frozen in _dataclass_info(tree) if not frozen]
        assert not violations, f"Domain dataclasses must be frozen. Violations: {violations}"

    def test_domain_models_use_tuples_not_lists(self):
        """Frozen fields use tuple[] rather than list[]."""
        models_file = SRC_ROOT / "domain" / "models.py"
        source = models_file.read_text(encoding="utf-8")
        violations = []
        for node, frozen in _dataclass_info(ast.parse(source)):
            if not frozen:
                continue
            for item in node.body:
                if not isinstance(item, ast.AnnAssign):
                    continue
                annotation = ast.get_source_segment(source, item.annotation) or ""
                if "list[" in annotation.lower():
                    violations.append(f"{node.name}.{getattr(item.target, 'id', '?')}")
        assert not violations, f"Use tuple[] in frozen dataclasses: {violations}"


class TestNoSilentExceptionSwallowing:
    """No 'except ...: pass' anywhere in src/lazi."""

    def test_no_bare_except_pass(self):
        violations = []
        for py_file in SRC_ROOT.rglob("*.py"):
            source = py_file.read_text(encoding="utf-8")
            for node in ast.walk(ast.parse(source)):
                if not isinstance(node, ast.ExceptHandler):
                    continue
                if node.type is None:
                    violations.append(f"{py_file.name}:{node.lineno}: bare except")
                    continue
                if len(node.body) == 1:
                    stmt = node.body[0]
                    is_ellipsis = (
                        isinstance(stmt, ast.Expr)
                        and isinstance(stmt.value, ast.Constant)
                        and stmt.value.value is ...
                    )
                    if isinstance(stmt, ast.Pass) or is_ellipsis:
                        handler = ast.get_source_segment(source, node.type) or ""
                        violations.append(f"{py_file.name}:{node.lineno}: except {handler}: pass")

        assert not violations, "Silent exception swallowing found:\n" + "\n".join(
            f"  - {v}" for v in violations
        )


class TestInterfaceConventions:
    """Interface naming and contract conventions."""

    def test_all_ports_end_with_interface(self):
        from lazi.domain import interfaces

        abstract_classes = [
            name
            for name, obj in inspect.getmembers(interfaces, inspect.isclass)
            if inspect.isabstract(obj) and not name.startswith("_")
        ]
        violations = [name for name in abstract_classes if not name.endswith("Interface")]
        assert not violations, f"Abstract classes should end with 'Interface': {violations}"

    def test_all_interface_methods_are_abstract(self):
        from lazi.domain import interfaces

        violations = []
        for name, cls in inspect.getmembers(interfaces, inspect.isclass):
            if not inspect.isabstract(cls) or not name.endswith("Interface"):
                continue
            for method_name, method in inspect.getmembers(cls, predicate=inspect.isfunction):
                if method_name.startswith("_"):
                    continue
                if not getattr(method, "__isabstractmethod__", False):
                    violations.append(f"{name}.{method_name}")
        assert not violations, f"Public interface methods must be abstract: {violations}"

    @pytest.mark.parametrize(
        "port, implementations",
        [
            ("LogStoreInterface", ["FilesystemLogStore", "InMemoryLogStore"]),
            ("IdAllocatorInterface", ["FileIdAllocator", "InMemoryIdAllocator"]),
            (
                "WorkflowRepositoryInterface",
                ["FilesystemWorkflowRepository", "InMemoryWorkflowRepository"],
            ),
            (
                "CustomNodeCatalogInterface",
                ["JsonCustomNodeCatalog", "InMemoryCustomNodeCatalog"],
            ),
            ("CommandRegistryInterface", ["JsonCommandRegistry", "InMemoryCommandRegistry"]),
            ("ProcessRunnerInterface", ["SubprocessRunner"]),
        ],
    )
    def test_adapters_implement_their_port(self, port, implementations):
        """Every adapter is a concrete subclass of its port."""
        from lazi import infrastructure
        from lazi.domain import interfaces

        port_cls = getattr(interfaces, port)
        for impl_name in implementations:
            impl_cls = getattr(infrastructure, impl_name)
            assert issubclass(impl_cls, port_cls), f"{impl_name} is not a {port}"
            assert not inspect.isabstract(impl_cls), (
                f"{impl_name} is missing: {sorted(impl_cls.__abstractmethods__)}"
            )
