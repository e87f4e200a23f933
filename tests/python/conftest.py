import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run long simulations that exercise the full default population",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: marks tests that run the default-sized population for many ticks",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow"):
        return

    skip_marker = pytest.mark.skip(reason="Long run (use --run-slow)")

    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_marker)
