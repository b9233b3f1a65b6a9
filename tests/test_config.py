"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from mathbot.config import Settings


def test_history_limit_defaults_to_fifty():
    assert Settings().history_limit == 50


def test_history_limit_can_be_lowered():
    assert Settings(HISTORY_LIMIT=10).history_limit == 10


@pytest.mark.parametrize("limit", [0, -1, 51])
def test_history_limit_out_of_range_is_rejected(limit):
    with pytest.raises(ValidationError):
        Settings(HISTORY_LIMIT=limit)


def test_history_limit_from_environment(monkeypatch):
    monkeypatch.setenv("HISTORY_LIMIT", "-5")
    with pytest.raises(ValidationError):
        Settings()
