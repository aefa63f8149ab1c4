"""
Import boundary guard for src/chunkstore/.

Rules:
- domain/ is pure: no sqlalchemy, psycopg, fastapi or pydantic_settings.
- services/ never imports fastapi (routers own HTTP concerns).
- infra/search/ never imports fastapi.
"""

import ast
from collections.abc import Callable
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = REPO_ROOT / "src" / "chunkstore"


def _file_imports_any(path: Path, is_banned: Callable[[str], bool]) -> bool:
    """Parse *path* with AST and return True if any import matches *is_banned*."""
    source = path.read_text(encoding="utf-8")
    try:
        tree = ast.parse(source, filename=str(path))
    except SyntaxError:
        return True

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if is_banned(alias.name):
                    return True
        elif isinstance(node, ast.ImportFrom):
            if is_banned(node.module or ""):
                return True

    return False


def _repo_relative(path: Path) -> str:
    """Return a POSIX-style path relative to the repo root."""
    return path.relative_to(REPO_ROOT).as_posix()


def _violations(subdir: str, is_banned: Callable[[str], bool]) -> list[str]:
    return [
        _repo_relative(py_file)
        for py_file in sorted((PACKAGE_ROOT / subdir).rglob("*.py"))
        if _file_imports_any(py_file, is_banned)
    ]


def test_domain_import_boundaries() -> None:
    """Domain files must not import database, HTTP or settings libraries."""
    banned = ("sqlalchemy", "psycopg", "fastapi", "pydantic_settings", "chunkstore.infra", "chunkstore.api")
    violations = _violations("domain", lambda m: m.startswith(banned))
    assert not violations, (
        "Domain files must stay free of infrastructure imports:\n"
        + "\n".join(f"  {v}" for v in violations)
    )


def test_service_import_boundaries() -> None:
    """Service files must not import from fastapi."""
    _is_fastapi = lambda m: m.startswith("fastapi")  # noqa: E731
    violations = _violations("services", _is_fastapi)
    assert not violations, (
        "Service files must not import fastapi:\n"
        + "\n".join(f"  {v}" for v in violations)
    )


def test_search_import_boundaries() -> None:
    """The storage layer must not depend on the HTTP layer."""
    violations = _violations("infra/search", lambda m: m.startswith(("fastapi", "chunkstore.api")))
    assert not violations, (
        "infra/search files must not import the HTTP layer:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
