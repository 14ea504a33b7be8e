"""Shared fixtures: AsyncMock sessions and canned query results."""

from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest

from grocery.schemas.auth import CurrentUser


def _result(scalar=None, rows=None, scalars=None, one=None):
    """A MagicMock shaped like an AsyncSession.execute() result."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    result.all.return_value = rows if rows is not None else []
    result.scalars.return_value.all.return_value = scalars if scalars is not None else []
    result.one.return_value = one
    return result


@pytest.fixture
def make_result():
    return _result


@pytest.fixture
def mock_db():
    """AsyncSession stand-in; add() is sync and begin_nested() is an async context manager."""
    db = AsyncMock()
    db.add = MagicMock()
    db.begin_nested = MagicMock()
    return db


@pytest.fixture
def admin_user():
    return CurrentUser(id=uuid.uuid4(), email="admin@example.com", role="admin")
