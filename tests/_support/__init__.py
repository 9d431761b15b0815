"""
Test support utilities for sqlpersist tests.

Entity types and helpers that don't fit as pytest fixtures but are
useful across multiple test files.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CREATE_ACCOUNT_TABLE = (
    "CREATE TABLE IF NOT EXISTS ACCOUNT("
    "ID INTEGER PRIMARY KEY AUTOINCREMENT, NAME VARCHAR(255) NOT NULL)"
)


@dataclass(frozen=True)
class Account:
    """Entity opting into materialization through ``from_row``."""

    id: int
    name: str

    @classmethod
    def from_row(cls, row: Any) -> Account:
        return cls(id=row["ID"], name=row["NAME"])


class StrictAccount:
    """Entity whose factory validates the row and rejects blank names."""

    def __init__(self, id: int, name: str):
        self.id = id
        self.name = name

    @staticmethod
    def from_row(row: Any) -> StrictAccount:
        name = row["NAME"]
        if not name:
            raise ValueError("NAME must be non-empty")
        return StrictAccount(row["ID"], name)


class NoFactory:
    """A type that never opted in."""


def description(*labels: str) -> tuple[tuple[Any, ...], ...]:
    """DB-API ``cursor.description`` for the given column labels."""
    return tuple((label, None, None, None, None, None, None) for label in labels)
