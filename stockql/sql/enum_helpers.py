"""Utilities to declare SQLAlchemy Enum columns concisely.

This module provides:

- sa_enum_type: build a configured SQLAlchemy Enum type storing token values.
- enum_column: a convenience factory returning a Column with SAEnum attached.
- enum_list_column: a Postgres ARRAY column of SAEnum values.

Storage always uses the enum's string token (``'DAILY_GOODS'``), the same
token accepted on the wire, so the schema layer can read the allowed set
straight off the column type.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Type

import enum as _enum
from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import ARRAY


def _values_callable_for_storage_values(enum_cls: Type[_enum.Enum]) -> Callable[[Iterable[_enum.Enum]], list]:
    """Build a values_callable that stores enum.value when it's str, else name."""
    def _values(iterable: Iterable[_enum.Enum]) -> list:
        out = []
        for m in iterable:
            v = m.value
            out.append(v if isinstance(v, str) else m.name)
        return out

    return _values


def sa_enum_type(
    enum_cls: Type[_enum.Enum],
    *,
    native_enum: bool = False,
    validate_strings: bool = True,
    create_constraint: bool = True,
    constraint_name: Optional[str] = None,
) -> SAEnum:
    """Create a configured SQLAlchemy Enum type storing string values."""
    return SAEnum(
        enum_cls,
        name=constraint_name or enum_cls.__name__.lower(),
        native_enum=native_enum,
        validate_strings=validate_strings,
        create_constraint=create_constraint,
        values_callable=_values_callable_for_storage_values(enum_cls),
    )


def enum_column(
    enum_cls: Type[_enum.Enum],
    *,
    nullable: bool = True,
    default: Optional[_enum.Enum] = None,
    constraint_name: Optional[str] = None,
    native_enum: bool = False,
    validate_strings: bool = True,
    create_constraint: bool = True,
    **column_kwargs,
) -> Column:
    """Convenience factory for a Column with a configured SAEnum.

    Example:

        from stockql.sql.enum_helpers import enum_column

        class OrganizationMember(Base):
            role = enum_column(UserRole, nullable=False, default=UserRole.VIEWER)
    """
    type_ = sa_enum_type(
        enum_cls,
        native_enum=native_enum,
        validate_strings=validate_strings,
        create_constraint=create_constraint,
        constraint_name=constraint_name,
    )
    return Column(type_, nullable=nullable, default=default, **column_kwargs)


def enum_list_column(
    enum_cls: Type[_enum.Enum],
    *,
    nullable: bool = False,
    default=list,
    **column_kwargs,
) -> Column:
    """Column holding a list of enum tokens (``providers AuthProvider[]``)."""
    type_ = ARRAY(sa_enum_type(enum_cls, create_constraint=False))
    return Column(type_, nullable=nullable, default=default, **column_kwargs)
