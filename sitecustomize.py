"""Start coverage in ``python -m kubenav_toolkit`` subprocesses spawned by tests."""

import os

_coverage_config = os.environ.get("COVERAGE_PROCESS_START", "")

if _coverage_config and os.path.isfile(_coverage_config):
    try:
        import coverage
    except ImportError:  # pragma: no cover - test extra not installed
        coverage = None
    if coverage is not None:
        coverage.process_startup()
