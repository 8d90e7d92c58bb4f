from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from helpers import FakeBackend, build_transcript


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def two_month_transcript() -> str:
    """200 messages from 1 Jan to 29 Feb 2024."""
    start = datetime(2024, 1, 1, 9, 0)
    return build_transcript(start, start + timedelta(days=59), 200)
