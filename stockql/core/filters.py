"""Scalar filter library.

Filter slots are declared on demand, one per (kind, nullable, nested,
aggregates) combination, e.g. ``StringFilter``, ``NestedIntNullableFilter``,
``EnumUserRoleWithAggregatesFilter`` or ``StringNullableListFilter``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import StrictBool, StrictStr

from .fields import InputField, any_of, opt
from .json_values import InputJsonValue, JsonFilterValue


@dataclass(frozen=True)
class ScalarKind:
    name: str
    comparable: bool = True
    text: bool = False
    numeric: bool = False
    setlike: bool = True
    json: bool = False


SCALAR_KINDS: Dict[str, ScalarKind] = {
    'String': ScalarKind('String', text=True),
    'Int': ScalarKind('Int', numeric=True),
    'Float': ScalarKind('Float', numeric=True),
    'Bool': ScalarKind('Bool', comparable=False, setlike=False),
    'DateTime': ScalarKind('DateTime'),
    'Json': ScalarKind('Json', comparable=False, setlike=False, json=True),
}


def kind_info(kind: str) -> ScalarKind:
    info = SCALAR_KINDS.get(kind)
    if info is not None:
        return info
    if kind.startswith('Enum'):
        return ScalarKind(kind, comparable=False)
    raise KeyError(kind)


# operator -> which value shape it takes
SCALAR_OPERATORS: Dict[str, Callable[[ScalarKind], bool]] = {
    'equals': lambda k: True,
    'in': lambda k: k.setlike,
    'notIn': lambda k: k.setlike,
    'lt': lambda k: k.comparable,
    'lte': lambda k: k.comparable,
    'gt': lambda k: k.comparable,
    'gte': lambda k: k.comparable,
    'contains': lambda k: k.text,
    'startsWith': lambda k: k.text,
    'endsWith': lambda k: k.text,
}
_LIST_VALUED = {'in', 'notIn'}

JSON_OPERATORS = (
    'path', 'mode', 'string_contains', 'string_starts_with', 'string_ends_with',
    'array_contains', 'array_starts_with', 'array_ends_with', 'lt', 'lte', 'gt', 'gte',
)

LIST_OPERATORS = ('equals', 'has', 'hasEvery', 'hasSome', 'isEmpty')


def filter_name(kind: str, *, nullable: bool = False, nested: bool = False, aggregates: bool = False) -> str:
    return (
        f"{'Nested' if nested else ''}{kind}{'Nullable' if nullable else ''}"
        f"{'WithAggregates' if aggregates else ''}Filter"
    )


def list_filter_name(kind: str) -> str:
    return f"{kind}NullableListFilter"


class FilterLibrary:
    """Declares scalar filter slots in a registry."""

    def __init__(self, registry: Any):
        self.registry = registry

    def declare_all(self, kinds: Iterable[str], list_kinds: Iterable[str] = ()) -> None:
        for kind in kinds:
            for nullable in (False, True):
                for nested in (False, True):
                    for aggregates in (False, True):
                        self.filter(kind, nullable=nullable, nested=nested, aggregates=aggregates)
        for kind in list_kinds:
            self.list_filter(kind)

    def filter(self, kind: str, *, nullable: bool = False, nested: bool = False, aggregates: bool = False) -> str:
        name = filter_name(kind, nullable=nullable, nested=nested, aggregates=aggregates)
        if name not in self.registry:
            info = kind_info(kind)
            if info.json:
                factory = lambda: self._json_fields(nullable, aggregates)
            else:
                factory = lambda: self._scalar_fields(info, nullable, nested, aggregates)
            self.registry.declare_model(name, factory, doc=f"Filter on a {'nullable ' if nullable else ''}{kind} column.")
        return name

    def list_filter(self, kind: str) -> str:
        name = list_filter_name(kind)
        if name not in self.registry:
            self.registry.declare_model(name, lambda: self._list_fields(kind))
        return name

    def _scalar_fields(self, info: ScalarKind, nullable: bool, nested: bool, aggregates: bool) -> Dict[str, InputField]:
        value = self.registry.value_type(info.name)
        fields: Dict[str, InputField] = {}
        for op, applies in SCALAR_OPERATORS.items():
            if not applies(info):
                continue
            ann = List[value] if op in _LIST_VALUED else value
            if nullable:
                ann = Optional[ann]
            fields[op] = opt(ann)
        if info.text and not nested:
            fields['mode'] = opt(self.registry.value_type('QueryMode'))
        inner = self.registry.ref(self.filter(info.name, nullable=nullable, nested=True, aggregates=aggregates))
        not_ann = any_of(value, inner)
        fields['not'] = opt(Optional[not_ann] if nullable else not_ann)
        if aggregates:
            self._aggregate_fields(fields, info, nullable)
        return fields

    def _aggregate_fields(self, fields: Dict[str, InputField], info: ScalarKind, nullable: bool) -> None:
        ref = self.registry.ref
        fields['_count'] = opt(ref(self.filter('Int', nullable=nullable, nested=True)))
        if info.numeric:
            fields['_avg'] = opt(ref(self.filter('Float', nullable=nullable, nested=True)))
            fields['_sum'] = opt(ref(self.filter(info.name, nullable=nullable, nested=True)))
        fields['_min'] = opt(ref(self.filter(info.name, nullable=nullable, nested=True)))
        fields['_max'] = opt(ref(self.filter(info.name, nullable=nullable, nested=True)))

    def _json_fields(self, nullable: bool, aggregates: bool) -> Dict[str, InputField]:
        fields: Dict[str, InputField] = {'equals': opt(JsonFilterValue)}
        for op in JSON_OPERATORS:
            if op == 'path':
                fields[op] = opt(List[StrictStr])
            elif op == 'mode':
                fields[op] = opt(self.registry.value_type('QueryMode'))
            elif op.startswith('string_'):
                fields[op] = opt(StrictStr)
            elif op.startswith('array_'):
                fields[op] = opt(Optional[InputJsonValue])
            else:
                fields[op] = opt(InputJsonValue)
        fields['not'] = opt(JsonFilterValue)
        if aggregates:
            self._aggregate_fields(fields, kind_info('Json'), nullable)
        return fields

    def _list_fields(self, kind: str) -> Dict[str, InputField]:
        value = self.registry.value_type(kind)
        return {
            'equals': opt(Optional[List[value]]),
            'has': opt(Optional[value]),
            'hasEvery': opt(List[value]),
            'hasSome': opt(List[value]),
            'isEmpty': opt(StrictBool),
        }
