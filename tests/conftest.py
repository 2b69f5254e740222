import os
from collections.abc import Sequence

import pytest

# Keep test runs off the JSON event log and on the in-memory seed stores
os.environ["LOG_TO_FILE"] = "false"
os.environ["SEARCH_BACKEND"] = "seed"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "e2e: in-process journeys through the full HTTP app and seed stores"
    )
    config.addinivalue_line("markers", "property: property-based deterministic tests")


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: Sequence[pytest.Item],
) -> None:
    for item in items:
        if "tests/e2e/" in item.nodeid:
            item.add_marker("e2e")
