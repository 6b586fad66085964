from datetime import datetime, timedelta, timezone

import pytest

from scheduler.domain.enums import MemoryState
from scheduler.domain.memory_model import FsrsMemoryModel, MemoryOutput

# A Wednesday, mid-afternoon UTC
NOW = datetime(2025, 3, 12, 15, 30, tzinfo=timezone.utc)
TODAY_START = datetime(2025, 3, 12, tzinfo=timezone.utc)


class StubMemoryModel:
    """Doubles stability and schedules ``stability`` days out; records every call."""

    def __init__(self, memory_state=MemoryState.REVIEW):
        self.memory_state = memory_state
        self.calls = []

    def apply(self, current, grade, now):
        self.calls.append((current, grade, now))
        stability = (current.stability or 1.0) * 2
        return MemoryOutput(
            stability=stability,
            difficulty=current.difficulty if current.difficulty is not None else 5.0,
            due_at=now + timedelta(days=stability),
            memory_state=self.memory_state,
            review_count=current.review_count + 1,
            lapse_count=current.lapse_count,
        )


class ExplodingMemoryModel:
    def apply(self, current, grade, now):
        raise AssertionError("memory model must not be consulted")


@pytest.fixture
def fsrs_model():
    return FsrsMemoryModel()


@pytest.fixture
def stub_model():
    return StubMemoryModel()


@pytest.fixture
def exploding_model():
    return ExplodingMemoryModel()
