"""
Tests for PracticeRepository against the in-memory Snowflake connection.

The mock understands exactly the statements the repository issues, so
these exercise the real SQL-building and row-mapping code paths.
"""

from uuid import uuid4

import pytest

from swimpractice.core.practice.parser import parse_practice
from swimpractice.infrastructure.snowflake.client import MockSnowflakeConnection
from swimpractice.infrastructure.snowflake.repositories.practices import PracticeRepository


MONDAY = """
## WARMUP
400 Free (easy)
4x50 Kick @1:00 [kickboard]

## MAIN SET
4x100 Free @1:30 - descend 1-4 (moderate) [fins, paddles]
200 IM
"""


@pytest.fixture
def connection() -> MockSnowflakeConnection:
    return MockSnowflakeConnection()


@pytest.fixture
def repository(connection) -> PracticeRepository:
    return PracticeRepository(connection)


class TestReplacePracticeSets:

    def test_saved_practice_loads_back_identically(self, repository):
        practice_id = uuid4()
        sets = parse_practice(MONDAY).sets

        repository.replace_practice_sets(practice_id, sets)

        assert repository.get_practice_sets(practice_id) == list(sets)

    def test_second_save_replaces_first(self, repository, connection):
        practice_id = uuid4()
        repository.replace_practice_sets(practice_id, parse_practice(MONDAY).sets)

        replacement = parse_practice("## COOLDOWN\n200 Choice").sets
        repository.replace_practice_sets(practice_id, replacement)

        assert repository.get_practice_sets(practice_id) == list(replacement)
        assert connection._count_sets(practice_id) == 1

    def test_practices_are_isolated(self, repository):
        monday, tuesday = uuid4(), uuid4()
        repository.replace_practice_sets(monday, parse_practice(MONDAY).sets)
        repository.replace_practice_sets(tuesday, parse_practice("200 Back").sets)

        assert len(repository.get_practice_sets(monday)) == 2
        assert len(repository.get_practice_sets(tuesday)) == 1

    def test_failed_save_keeps_previous_practice(self, repository, monkeypatch):
        """Delete and inserts share one transaction."""
        practice_id = uuid4()
        original = parse_practice(MONDAY).sets
        repository.replace_practice_sets(practice_id, original)

        def fail(*args, **kwargs):
            raise RuntimeError("insert failed")

        monkeypatch.setattr(repository, "_insert_item", fail)

        with pytest.raises(RuntimeError, match="insert failed"):
            repository.replace_practice_sets(practice_id, parse_practice("200 Back").sets)

        assert repository.get_practice_sets(practice_id) == list(original)

    def test_saving_nothing_clears_practice(self, repository):
        practice_id = uuid4()
        repository.replace_practice_sets(practice_id, parse_practice(MONDAY).sets)

        repository.replace_practice_sets(practice_id, ())

        assert repository.get_practice_sets(practice_id) == []


class TestGetPracticeSets:

    def test_unknown_practice_is_empty(self, repository):
        assert repository.get_practice_sets(uuid4()) == []

    def test_ping(self, repository):
        assert repository.ping()
