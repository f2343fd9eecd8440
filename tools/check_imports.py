"""Validate Python layer import boundaries for ficdown."""

from __future__ import annotations

import ast
from importlib.util import resolve_name
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / "ficdown"
PACKAGE = "ficdown"
KNOWN_LAYERS = {"domain", "core", "adapters", "application", "cli"}
RULES: dict[str, set[str]] = {
    "domain": {"core", "adapters", "application", "cli"},
    "core": {"adapters", "application", "cli"},
    "adapters": {"application", "cli"},
}


def _module_name(path: Path, source_root: Path) -> str:
    parts = list(path.relative_to(source_root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join([PACKAGE, *parts])


def _layer_of(module_name: str) -> str | None:
    parts = module_name.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1] if parts[1] in KNOWN_LAYERS else None


def _imported_modules(tree: ast.AST, module_name: str, is_package: bool) -> set[str]:
    package = module_name if is_package else module_name.rpartition(".")[0]
    imported: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imported.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            base = node.module or ""
            if node.level:
                try:
                    base = resolve_name("." * node.level + base, package)
                except ImportError:
                    continue
            imported.add(base)
            # `from ficdown import core` names the layer in the alias.
            imported.update(f"{base}.{alias.name}" for alias in node.names)
    return imported


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    try:
        relative = path.relative_to(source_root)
    except ValueError:
        return []
    layer = relative.parts[0] if len(relative.parts) > 1 else None
    banned = RULES.get(layer or "", set())
    if not banned:
        return []

    module_name = _module_name(path, source_root)
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imported_layers = {
        imported_layer
        for module in _imported_modules(tree, module_name, path.name == "__init__.py")
        if (imported_layer := _layer_of(module)) is not None
    }
    return [
        f"{path}: {layer} must not import {PACKAGE}.{imported_layer}"
        for imported_layer in sorted(imported_layers & banned)
    ]


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main() -> None:
    violations = check_import_boundaries()
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
