"""Unique-key alternatives of an entity.

A ``WhereUniqueInput`` payload identifies exactly one row through one of the
entity's unique keys: the primary id, a single unique column, or a compound
key given in wrapped form (``organizationId_userId: {organizationId, userId}``).
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple


class UniqueKeyKind(str, enum.Enum):
    PRIMARY = 'ByPrimaryId'
    FIELD = 'ByUniqueField'
    COMPOUND = 'ByCompoundKey'


@dataclass(frozen=True)
class UniqueKey:
    fields: Tuple[str, ...]
    kind: UniqueKeyKind

    @property
    def name(self) -> str:
        """Wire name of the key: the field itself or ``a_b`` for compound keys."""
        return '_'.join(self.fields)

    @property
    def compound(self) -> bool:
        return len(self.fields) > 1


@dataclass(frozen=True)
class UniqueMatch:
    """The alternative that identified a row plus the remaining narrowing filter."""

    key: UniqueKey
    value: Dict[str, Any]
    narrowing: Dict[str, Any]

    @property
    def kind(self) -> UniqueKeyKind:
        return self.key.kind


def describe_keys(keys: Iterable[UniqueKey]) -> str:
    """``id | email | organizationId_userId(organizationId, userId)``"""
    parts = []
    for key in keys:
        if key.compound:
            parts.append(f"{key.name}({', '.join(key.fields)})")
        else:
            parts.append(key.name)
    return ' | '.join(parts)


def present_keys(keys: Sequence[UniqueKey], payload: Mapping[str, Any]) -> Tuple[UniqueKey, ...]:
    """Unique keys carried by ``payload`` with a non-null value."""
    return tuple(k for k in keys if payload.get(k.name) is not None)


def match_unique_key(keys: Sequence[UniqueKey], payload: Mapping[str, Any]) -> Optional[UniqueMatch]:
    """Pick the alternative identifying the row, primary id first.

    ``payload`` is a parsed ``WhereUniqueInput`` (wire names). Every other key
    of the payload is returned as the narrowing filter ANDed with the match.
    """
    ordered = sorted(keys, key=lambda k: list(UniqueKeyKind).index(k.kind))
    for key in ordered:
        raw = payload.get(key.name)
        if raw is None:
            continue
        if key.compound:
            value = {f: raw[f] for f in key.fields}
        else:
            value = {key.name: raw}
        narrowing = {k: v for k, v in payload.items() if k != key.name}
        return UniqueMatch(key=key, value=value, narrowing=narrowing)
    return None
