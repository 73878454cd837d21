"""Fixtures and configuration for pytest."""

from collections.abc import Callable

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "gpu: mark test as requiring a GPU")


@pytest.fixture
def assert_balanced() -> Callable[[str | None], None]:
    """Fixture checking that a generated program has matched braces."""

    def check(code: str | None) -> None:
        assert code is not None
        assert code.count("{") == code.count("}"), code

    return check
