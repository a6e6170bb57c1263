import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


class ScriptedRng:
    """Stand-in random source that replays fixed step deltas, then repeats the last one."""

    def __init__(self, deltas=(0,), seed: int = 0):
        self._deltas = list(deltas)
        self._cursor = 0
        self.seed = seed

    def reset(self) -> None:
        self._cursor = 0

    def next_step_delta(self) -> int:
        if self._cursor < len(self._deltas):
            value = self._deltas[self._cursor]
            self._cursor += 1
            return value
        return self._deltas[-1]


@pytest.fixture
def still_rng() -> ScriptedRng:
    return ScriptedRng((0,))


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-config-tests",
        action="store_true",
        default=False,
        help="run tests that are intended only for configuration changes",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "config_change: marks tests that should only run when configuration files change",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-config-tests"):
        return

    skip_marker = pytest.mark.skip(
        reason="Run only when configuration is modified (use --run-config-tests)",
    )

    for item in items:
        if "config_change" in item.keywords:
            item.add_marker(skip_marker)
