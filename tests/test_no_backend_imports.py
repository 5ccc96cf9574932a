"""Tripwire test: ensure the package stays a self-contained library.

This test walks the imported package source tree and fails if any module
imports a hosted web stack, manipulates sys.path, or pulls in a settings
framework.

Goal: prevent "one tiny import" from sneaking in.
"""

import re
from pathlib import Path


FORBIDDEN_PATTERNS = [
    (r'sys\.path', 'sys.path manipulation'),
    (r'\bfastapi\b', 'fastapi (hosted web framework)'),
    (r'\buvicorn\b', 'uvicorn (hosted ASGI server)'),
    (r'\bflask\b', 'flask (hosted web framework)'),
    (r'\bpydantic_settings\b', 'pydantic_settings (hosted config smell)'),
]


def scan_file_for_forbidden_tokens(file_path: Path) -> list[str]:
    """Return violation strings for import lines naming a forbidden module."""
    violations = []
    content = file_path.read_text(encoding='utf-8')

    for line_num, line in enumerate(content.split('\n'), 1):
        stripped = line.strip()
        if stripped.startswith('#'):
            continue
        for pattern, description in FORBIDDEN_PATTERNS:
            if not re.search(pattern, line):
                continue
            if stripped.startswith(('from ', 'import ')):
                violations.append(f"{file_path}:{line_num}: {description} - {stripped}")
            elif 'sys.path' in line and ('insert' in line or 'append' in line):
                violations.append(f"{file_path}:{line_num}: {description} - {stripped}")

    return violations


def test_no_forbidden_tokens_in_installed_package():
    """Scan the actually-imported package."""
    import triggergraph
    pkg_dir = Path(triggergraph.__file__).parent

    violations = []
    for py_file in pkg_dir.rglob("*.py"):
        if "__pycache__" in str(py_file):
            continue
        violations.extend(scan_file_for_forbidden_tokens(py_file))

    if violations:
        violation_msg = "\n".join(violations)
        raise AssertionError(
            f"Found {len(violations)} forbidden token violations in triggergraph:\n\n"
            f"{violation_msg}\n\n"
            "Package must be closed under its own imports."
        )


def test_scanner_flags_imports(tmp_path):
    """The scanner itself catches an import of a hosted framework."""
    probe = tmp_path / "probe.py"
    probe.write_text("import fastapi\nx = 'fastapi in a string'\n", encoding="utf-8")
    violations = scan_file_for_forbidden_tokens(probe)
    assert len(violations) == 1


def test_internal_not_in_public_namespace():
    """_internal is importable for tests and tooling but is not public API."""
    import triggergraph
    import triggergraph._internal.benchmarks  # noqa: F401

    assert "_internal" not in triggergraph.__all__
