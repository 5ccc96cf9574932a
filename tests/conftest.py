"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed triggergraph package.
"""

import pytest


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


class SequentialIds:
    """Deterministic id factory: node-1, node-2, edge-1, ..."""

    def __init__(self):
        self.counts = {}

    def __call__(self, kind: str) -> str:
        self.counts[kind] = self.counts.get(kind, 0) + 1
        return f"{kind}-{self.counts[kind]}"


class EmissionRecorder:
    """Change callback that keeps every (conditions, edges) emission."""

    def __init__(self):
        self.calls = []

    def __call__(self, conditions, edges):
        self.calls.append((conditions, edges))

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def recorder():
    return EmissionRecorder()
