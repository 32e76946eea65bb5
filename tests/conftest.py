"""共享 fixture"""

from __future__ import annotations

import pytest

from tests.helpers import FakeExecutor


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()
