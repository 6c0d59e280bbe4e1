from __future__ import annotations

import enum
import functools
from typing import Any, Iterable, List, Optional, Tuple, Type

from pydantic import BeforeValidator
from sqlalchemy.sql.sqltypes import ARRAY
from sqlalchemy.sql.sqltypes import Enum as SAEnumType
from typing_extensions import Annotated, Literal


def enum_class_of_type(sa_type: Any) -> Optional[type]:
    """Return the Python Enum bound to a SQLAlchemy type (or an ARRAY of it)."""
    if isinstance(sa_type, ARRAY):
        sa_type = sa_type.item_type
    if isinstance(sa_type, SAEnumType):
        return getattr(sa_type, 'enum_class', None)
    return None


def enum_tokens(enum_cls: Type[enum.Enum]) -> Tuple[str, ...]:
    """Wire tokens of an enum in declaration order."""
    out: List[str] = []
    for member in enum_cls:
        v = member.value
        out.append(v if isinstance(v, str) else member.name)
    return tuple(out)


def token_literal(tokens: Iterable[str]) -> Any:
    """``Literal['A', 'B', ...]`` for a closed, case-sensitive token set."""
    values = tuple(tokens)
    if not values:
        raise ValueError('token set must not be empty')
    return Literal[values]  # type: ignore[valid-type]


def enum_literal(enum_cls: Type[enum.Enum]) -> Any:
    return token_literal(enum_tokens(enum_cls))


def enum_kind_name(enum_cls: Type[enum.Enum]) -> str:
    """Scalar kind name used in filter slot names: ``EnumUserRole``."""
    return f"Enum{enum_cls.__name__}"


def coerce_enum_token(enum_cls: Type[enum.Enum], value: Any) -> Any:
    """Map an enum member to its storage token; other values pass through."""
    if isinstance(value, enum_cls):
        v = value.value
        return v if isinstance(v, str) else value.name
    return value


def enum_value_type(enum_cls: Type[enum.Enum]) -> Any:
    """Validated annotation for an enum column: members and exact tokens only."""
    return Annotated[
        enum_literal(enum_cls),
        BeforeValidator(functools.partial(coerce_enum_token, enum_cls)),
    ]
