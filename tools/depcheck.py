"""Layering check for the cafeorders package.

The domain layer may import only the standard library and itself. The
application layer may add pydantic DTOs and prometheus metrics, but must
reach storage, redis and HTTP only through its ports.
"""

from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "src" / "cafeorders"

_OUTER_LAYERS = frozenset({"cafeorders.api", "cafeorders.infrastructure"})
_IO_LIBRARIES = frozenset({"fastapi", "starlette", "sqlalchemy", "psycopg", "redis", "httpx"})

LAYER_RULES: dict[str, frozenset[str]] = {
    "domain": _OUTER_LAYERS
    | _IO_LIBRARIES
    | {"cafeorders.application", "pydantic", "opentelemetry", "prometheus_client"},
    "application": _OUTER_LAYERS | _IO_LIBRARIES,
}


@dataclass(frozen=True)
class Violation:
    layer: str
    file_path: Path
    line: int
    module: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _is_forbidden(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == name or module.startswith(f"{name}.") for name in forbidden)


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            yield node.lineno, node.module


def _scan_file(layer: str, file_path: Path) -> list[Violation]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    forbidden = LAYER_RULES[layer]
    return [
        Violation(layer=layer, file_path=file_path, line=line, module=module)
        for line, module in _imported_modules(tree)
        if _is_forbidden(module, forbidden)
    ]


def find_violations(layer: str, paths: Sequence[Path]) -> list[Violation]:
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            violations.extend(_scan_file(layer, file_path))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import layering check for cafeorders.")
    parser.add_argument(
        "--layer",
        choices=sorted(LAYER_RULES),
        action="append",
        default=[],
        help="Layer to check (repeatable). Defaults to every layer.",
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Scan these paths under the rules of a single --layer instead of the package.",
    )
    args = parser.parse_args(argv)
    if args.path and len(args.layer) != 1:
        parser.error("--path needs exactly one --layer")
    return args


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    layers = args.layer or sorted(LAYER_RULES)

    violations: list[Violation] = []
    for layer in layers:
        paths = [Path(item) for item in args.path] if args.path else [PACKAGE_ROOT / layer]
        violations.extend(find_violations(layer, paths))

    if not violations:
        print(f"depcheck passed ({', '.join(layers)})")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"[{violation.layer}] {violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
