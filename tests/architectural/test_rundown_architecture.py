"""Architectural tests for the rundown service.

These tests inspect source files with ``ast`` and plain text only; no
application code is imported or executed. They pin the layering of the
package (core logic free of HTTP, routes free of SQL), the absence of a
module-level database handle, and the consistency between the error
taxonomy, its HTTP mapping and the packaged schema.
"""

from __future__ import annotations

import ast
import re
from pathlib import Path
from typing import Dict, Iterable, List, Set

ROOT = Path(__file__).resolve().parents[2]
PACKAGE = ROOT / "rundown"
LOGIC = PACKAGE / "logic"
ROUTES = PACKAGE / "routes"
MIGRATIONS = PACKAGE / "db" / "migrations"


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - defensive path
        raise AssertionError(f"Failed to read text file: {path}: {exc}")


def _parse(path: Path) -> ast.Module:
    return ast.parse(_read_text(path), filename=str(path))


def _py_files(root: Path) -> Iterable[Path]:
    return sorted(p for p in root.rglob("*.py") if "__pycache__" not in p.parts)


def _imported_modules(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _class_codes(tree: ast.Module) -> Dict[str, str]:
    """Map class name -> literal ``code`` attribute declared in its body."""
    codes: Dict[str, str] = {}
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for stmt in node.body:
            if (
                isinstance(stmt, ast.Assign)
                and any(isinstance(t, ast.Name) and t.id == "code" for t in stmt.targets)
                and isinstance(stmt.value, ast.Constant)
            ):
                codes[node.name] = str(stmt.value.value)
    return codes


def test_core_logic_does_not_depend_on_http_layer():
    offenders: List[str] = []
    for path in _py_files(LOGIC):
        for module in _imported_modules(_parse(path)):
            if module.split(".")[0] in {"fastapi", "starlette"} or module.startswith(("rundown.routes", "rundown.http")):
                offenders.append(f"{path.name}: {module}")
    assert offenders == []


def test_routes_do_not_touch_storage_directly():
    offenders: List[str] = []
    for path in _py_files(ROUTES):
        for module in _imported_modules(_parse(path)):
            if module.split(".")[0] == "sqlalchemy" or module.startswith(
                ("rundown.logic.repository_", "rundown.logic.coordinator", "rundown.db")
            ):
                offenders.append(f"{path.name}: {module}")
    assert offenders == []


def test_no_module_level_database_handle():
    offenders: List[str] = []
    for path in _py_files(PACKAGE):
        tree = _parse(path)
        for node in ast.walk(tree):
            if isinstance(node, ast.Global):
                offenders.append(f"{path.relative_to(ROOT)}: global {', '.join(node.names)}")
        for node in tree.body:
            if isinstance(node, ast.Assign) and isinstance(node.value, ast.Call):
                func = node.value.func
                name = func.id if isinstance(func, ast.Name) else getattr(func, "attr", "")
                if name in {"create_engine", "build_engine"}:
                    offenders.append(f"{path.relative_to(ROOT)}: module-level {name}()")
    assert offenders == []


def test_reorder_helpers_are_pure():
    tree = _parse(LOGIC / "reorder.py")
    forbidden = {"sqlalchemy", "rundown.logic.collection_store", "rundown.logic.coordinator"}
    assert not (_imported_modules(tree) & forbidden)


def test_every_error_code_has_an_http_status():
    codes = set(_class_codes(_parse(LOGIC / "errors.py")).values())
    codes.discard("RUNDOWN_ERROR")
    mapping_src = _read_text(PACKAGE / "http" / "error_mapping.py")
    mapped = set(re.findall(r'"([A-Z_]+)":\s*\d{3}', mapping_src))
    assert codes, "no error codes declared"
    assert codes <= mapped, f"unmapped codes: {sorted(codes - mapped)}"


def test_request_positions_are_untyped():
    """Position fields must reach the reorder engine without coercion."""
    tree = _parse(PACKAGE / "models" / "requests.py")
    position_fields = {"index", "from_index", "to_index"}
    seen: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            if node.target.id in position_fields:
                seen.add(node.target.id)
                assert isinstance(node.annotation, ast.Name) and node.annotation.id == "Any", node.target.id
    assert seen == position_fields


def test_schema_declares_every_table_the_stores_use():
    sql = "\n".join(_read_text(p) for p in sorted(MIGRATIONS.glob("*.sql")))
    declared = {
        m.group(1)
        for m in re.finditer(r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(\w+)", sql, re.IGNORECASE)
    }
    used: Set[str] = set()
    for name in ("repository_embedded.py", "repository_referential.py", "kinds.py"):
        src = _read_text(LOGIC / name)
        used.update(re.findall(r"(?:FROM|INTO|UPDATE|JOIN)\s+([a-z_]+)\b", src))
        used.update(re.findall(r'(?:member_table|parent_table|ref_table)="([a-z_]+)"', src))
    assert used, "no table references found"
    assert used <= declared, f"undeclared tables: {sorted(used - declared)}"
