"""Entity materialization: Row → caller-defined object.

A target is either a class exposing the ``from_row`` factory (classmethod
or staticmethod taking one row mapping) or any callable row decoder.
No base class is required; the factory owns all field mapping and
validation.

Examples:
    >>> @dataclass(frozen=True)
    ... class Account:
    ...     id: int
    ...     name: str
    ...
    ...     @classmethod
    ...     def from_row(cls, row):
    ...         return cls(id=row["ID"], name=row["NAME"])
    >>> materialize(Account, {"ID": 1, "NAME": "CASH"})
    Account(id=1, name='CASH')
    >>> materialize(lambda row: row["NAME"], {"ID": 1, "NAME": "CASH"})
    'CASH'
"""

from __future__ import annotations

from typing import Any

from .errors import ErrorCategory, ErrorContext, PersistenceError
from .protocols import ENTITY_FACTORY_METHOD, EntityFactory, Row, RowDecoder


def _target_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


def resolve_decoder(target: type[EntityFactory[Any]] | RowDecoder[Any]) -> RowDecoder[Any]:
    """Find the row decoder for ``target``.

    Classes must expose a callable ``from_row``; any other callable is used
    as the decoder itself.
    """
    if isinstance(target, type):
        factory = target.from_row if isinstance(target, EntityFactory) else None
        if not callable(factory):
            raise PersistenceError(
                f"{_target_name(target)} does not expose a callable "
                f"{ENTITY_FACTORY_METHOD}(row) factory.",
                category=ErrorCategory.MAPPING,
                context=ErrorContext(entity=_target_name(target), operation="resolve_decoder"),
            )
        return factory
    if callable(target):
        return target
    raise PersistenceError(
        f"{target!r} is neither an entity type nor a row decoder.",
        category=ErrorCategory.MAPPING,
        context=ErrorContext(entity=_target_name(target), operation="resolve_decoder"),
    )


def materialize(target: Any, row: Row) -> Any:
    """Build one entity from ``row``; any failure becomes a PersistenceError."""
    decoder = resolve_decoder(target)
    try:
        return decoder(row)
    except Exception as e:
        invoked = _target_name(target)
        if isinstance(target, type):
            invoked = f"{invoked}.{ENTITY_FACTORY_METHOD}"
        raise PersistenceError(
            f"Error invoking {invoked}(): {e!r}",
            category=ErrorCategory.MAPPING,
            context=ErrorContext(entity=_target_name(target), operation="materialize"),
            cause=e,
        ) from e


__all__ = [
    "resolve_decoder",
    "materialize",
]
