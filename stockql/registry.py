from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, PlainValidator, StrictBool, StrictFloat, StrictInt, StrictStr, Strict, TypeAdapter, ValidationError, create_model
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from .config import RegistryConfig
from .core.enum_utils import enum_kind_name, enum_value_type, token_literal
from .core.fields import EntityDef, InputField, introspect_declarative, introspect_models
from .core.filters import FilterLibrary
from .core.json_values import (
    InputJsonValue,
    JsonNullValueFilter,
    JsonNullValueInput,
    JsonValue,
    NullableJsonNullValueInput,
)
from .core.shapes import RULES, EntityShape, InputShape, LenientInputShape
from .core.unique import UniqueKey, UniqueMatch, match_unique_key
from .core.update_ops import FieldUpdate, UpdateOperationLibrary, normalize_update
from .enums import NullsOrder, QueryMode, SortOrder
from .errors import PaginationError, SchemaDefinitionError, SchemaNotFoundError, SchemaValidationError
from .naming import SlotNames, python_attr, strip_schema_suffix

# Project logger
_logger = logging.getLogger("stockql")

_SHAPES = {
    'entity': EntityShape,
    'strict': InputShape,
}


@dataclass
class ParseResult:
    """Outcome of :meth:`SchemaRegistry.safe_parse`."""

    success: bool
    data: Any = None
    error: Optional[SchemaValidationError] = None


class _Slot:
    __slots__ = ('name', 'builder', 'kind')

    def __init__(self, name: str, builder: Callable[[], Any], kind: str):
        self.name = name
        self.builder = builder
        self.kind = kind


class SchemaRegistry:
    """Registry of named, lazily materialized schemas.

    Declaring a slot only stores its builder. A slot is built on first
    :meth:`get`; references between slots are per-field validators that look
    the target up by name at validation time, so mutually recursive schemas
    (User -> Session -> User) never build each other eagerly.
    """

    names = SlotNames

    def __init__(self, models: Optional[Iterable[Any]] = None, *, base: Any = None, config: Optional[RegistryConfig] = None):
        self.config = config if config is not None else RegistryConfig()
        self._lock = threading.RLock()
        self._slots: Dict[str, _Slot] = {}
        self._built: Dict[str, Any] = {}
        if base is not None:
            self.entities: Dict[str, EntityDef] = introspect_declarative(base)
        elif models is not None:
            self.entities = introspect_models(models)
        else:
            from .models import Base
            self.entities = introspect_declarative(Base)
        self.enums: Dict[str, type] = {}
        for entity in self.entities.values():
            for col in entity.columns:
                if col.enum_cls is not None:
                    self.enums[col.kind] = col.enum_cls
        self.filters = FilterLibrary(self)
        self.update_ops = UpdateOperationLibrary(self)
        self._declare_globals()
        self._declare_entities()
        _logger.debug("registry declared %d slots for %d entities", len(self._slots), len(self.entities))

    # --- declaration ----------------------------------------------------------------

    def __contains__(self, name: str) -> bool:
        return strip_schema_suffix(name) in self._slots or name in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def slot_names(self) -> List[str]:
        return list(self._slots)

    def declare(self, name: str, builder: Callable[[], Any], *, kind: str = 'model') -> str:
        """Register a named slot; the first declaration of a name wins."""
        with self._lock:
            if name not in self._slots:
                self._slots[name] = _Slot(name, builder, kind)
                _logger.debug("declared slot %s", name)
        return name

    def declare_model(
        self,
        name: str,
        fields: Callable[[], Dict[str, InputField]],
        *,
        shape: str = 'input',
        rules: Sequence[str] = (),
        class_vars: Optional[Dict[str, Any]] = None,
        doc: Optional[str] = None,
    ) -> str:
        return self.declare(name, lambda: self._create_model(name, fields(), shape, rules, class_vars, doc))

    def declare_value(self, name: str, annotation: Callable[[], Any]) -> str:
        return self.declare(name, lambda: TypeAdapter(annotation()), kind='value')

    def _shape(self, shape: str) -> type:
        if shape == 'input':
            return InputShape if self.config.strict_inputs else LenientInputShape
        return _SHAPES[shape]

    def _create_model(
        self,
        name: str,
        fields: Dict[str, InputField],
        shape: str,
        rules: Sequence[str],
        class_vars: Optional[Dict[str, Any]],
        doc: Optional[str],
    ) -> type:
        definitions: Dict[str, Any] = {}
        taken: set = set()
        for wire, spec in fields.items():
            attr = python_attr(wire, taken)
            taken.add(attr)
            if spec.required:
                info = Field(alias=wire)
            else:
                info = Field(default=spec.default, alias=wire)
            definitions[attr] = (spec.annotation, info)
        bases = tuple(RULES[r] for r in rules) + (self._shape(shape),)
        model = create_model(name, __base__=bases if len(bases) > 1 else bases[0], __module__=__name__, **definitions)
        if doc:
            model.__doc__ = doc
        for key, value in (class_vars or {}).items():
            setattr(model, key, value)
        return model

    # --- materialization ------------------------------------------------------------

    def get(self, name: str) -> Any:
        """Materialized slot: a pydantic model class or a ``TypeAdapter``."""
        built = self._built.get(name)
        if built is not None:
            return built
        key = name if name in self._slots else strip_schema_suffix(name)
        built = self._built.get(key)
        if built is not None:
            return built
        with self._lock:
            built = self._built.get(key)
            if built is not None:
                return built
            slot = self._slots.get(key)
            if slot is None:
                raise SchemaNotFoundError(name)
            built = slot.builder()
            self._built[key] = built
            _logger.debug("materialized slot %s", key)
            return built

    def build_all(self) -> int:
        """Materialize every slot, including slots declared while building."""
        count = 0
        while True:
            pending = [n for n in list(self._slots) if n not in self._built]
            if not pending:
                break
            for name in pending:
                self.get(name)
                count += 1
        _logger.info("built %d schema slots", len(self._built))
        return count

    def ref(self, name: str, *, relation: bool = False) -> Any:
        """Annotation validating a value against another slot, resolved lazily."""
        if name not in self._slots:
            raise SchemaNotFoundError(name)
        registry = self

        def _resolve(value: Any) -> Any:
            try:
                validated = registry._validate_slot(name, value)
            except ValidationError as exc:
                raise PydanticCustomError(
                    'nested_validation_failure',
                    '{schema} validation failed',
                    {'schema': name, 'relation': relation, 'errors': exc.errors(include_url=False)},
                ) from None
            return registry.dump(validated)

        _resolve.__name__ = f"lazy_{name}"
        return Annotated[Any, PlainValidator(_resolve)]

    # --- validation -----------------------------------------------------------------

    def _validate_slot(self, name: str, data: Any) -> Any:
        target = self.get(name)
        if isinstance(target, TypeAdapter):
            return target.validate_python(data)
        return target.model_validate(data)

    @staticmethod
    def dump(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(by_alias=True, exclude_unset=True)
        return value

    def validate(self, name: str, data: Any) -> Any:
        """Validate ``data``; returns the model instance (or the plain value for value slots)."""
        try:
            return self._validate_slot(name, data)
        except ValidationError as exc:
            raise SchemaValidationError.from_pydantic(strip_schema_suffix(name), exc, self._slots) from None

    def parse(self, name: str, data: Any) -> Any:
        """Validate ``data`` and return the wire payload."""
        return self.dump(self.validate(name, data))

    def safe_parse(self, name: str, data: Any) -> ParseResult:
        try:
            return ParseResult(True, self.parse(name, data))
        except SchemaValidationError as err:
            return ParseResult(False, error=err)

    def validator(self, name: str) -> 'BoundSchema':
        key = name if name in self._slots else strip_schema_suffix(name)
        if key not in self._slots:
            raise SchemaNotFoundError(name)
        return BoundSchema(self, key)

    # --- value types ----------------------------------------------------------------

    def value_type(self, kind: str) -> Any:
        """Annotation for one value of a scalar kind."""
        if kind == 'String':
            return StrictStr
        if kind == 'Int':
            return StrictInt
        if kind == 'Float':
            return StrictFloat
        if kind == 'Bool':
            return StrictBool
        if kind == 'DateTime':
            return datetime if self.config.coerce_date else Annotated[datetime, Strict()]
        if kind == 'Json':
            return InputJsonValue
        if kind == 'SortOrder':
            return token_literal(m.value for m in SortOrder)
        if kind == 'NullsOrder':
            return token_literal(m.value for m in NullsOrder)
        if kind == 'QueryMode':
            return token_literal(m.value for m in QueryMode)
        enum_cls = self.enums.get(kind)
        if enum_cls is not None:
            return enum_value_type(enum_cls)
        raise SchemaDefinitionError(f"Unknown scalar kind: {kind}")

    def scalar_field_type(self, entity: str) -> Any:
        return token_literal(self.entities[entity].column_names)

    # --- entity helpers -------------------------------------------------------------

    def entity(self, name: str) -> EntityDef:
        try:
            return self.entities[name]
        except KeyError:
            raise SchemaNotFoundError(name) from None

    def unique_keys(self, entity: str) -> Tuple[UniqueKey, ...]:
        return tuple(self.entity(entity).unique_keys)

    def match_unique(self, entity: str, where: Mapping[str, Any]) -> UniqueMatch:
        """Validate a ``WhereUniqueInput`` and return the alternative it uses."""
        parsed = self.parse(self.names.where_unique(entity), where)
        match = match_unique_key(self.unique_keys(entity), parsed)
        if match is None:
            # unreachable after a successful parse
            raise SchemaDefinitionError(f"{entity}WhereUniqueInput accepted a payload without unique key")
        return match

    def field_updates(self, entity: str, data: Mapping[str, Any], *, unchecked: bool = False) -> List[FieldUpdate]:
        """Validate an update payload and normalize its scalar fields into intents."""
        schema = self.names.unchecked_update(entity) if unchecked else self.names.update(entity)
        parsed = self.parse(schema, data)
        return normalize_update(self.entity(entity), parsed)

    def find_many_args_for_page(self, entity: str, request: Any, **extra: Any) -> Any:
        """Validated ``<Entity>FindManyArgs`` for one page of ``entity``."""
        from .pagination import PageRequest, pagination_params

        if not isinstance(request, PageRequest):
            request = PageRequest.from_mapping(request, max_limit=self.config.max_page_size)
        if request.limit > self.config.max_page_size:
            raise PaginationError(f"limit must be <= {self.config.max_page_size}")
        ent = self.entity(entity)
        if request.sort_by is not None and request.sort_by not in ent.column_names:
            raise PaginationError(f"{entity} cannot be sorted by '{request.sort_by}'")
        args = dict(extra)
        args.update(pagination_params(request))
        return self.parse(self.names.operation_args(entity, 'FindMany'), args)

    # --- declarations -----------------------------------------------------------------

    def _declare_globals(self) -> None:
        self.declare_value('JsonValue', lambda: JsonValue)
        self.declare_value('InputJsonValue', lambda: InputJsonValue)
        self.declare_value('JsonNullValueInput', lambda: JsonNullValueInput)
        self.declare_value('NullableJsonNullValueInput', lambda: NullableJsonNullValueInput)
        self.declare_value('JsonNullValueFilter', lambda: JsonNullValueFilter)
        for query_enum in (SortOrder, NullsOrder, QueryMode):
            self.declare_value(query_enum.__name__, lambda k=query_enum.__name__: self.value_type(k))
        for kind, enum_cls in self.enums.items():
            self.declare_value(enum_cls.__name__, lambda k=kind: self.value_type(k))
        self.declare_model(
            'SortOrderInput',
            lambda: {
                'sort': InputField(self.value_type('SortOrder'), required=True),
                'nulls': InputField(self.value_type('NullsOrder')),
            },
        )
        kinds = {'String', 'Int', 'Float', 'Bool', 'DateTime'}
        list_kinds = set()
        for entity in self.entities.values():
            for col in entity.columns:
                if col.is_list:
                    list_kinds.add(col.kind)
                else:
                    kinds.add(col.kind)
        self.filters.declare_all(sorted(kinds), sorted(list_kinds))
        for kind in sorted(kinds - {'Json'}):
            self.update_ops.scalar(kind)
            self.update_ops.scalar(kind, nullable=True)

    def _declare_entities(self) -> None:
        from .builders import COMPOSERS

        composers = [composer(self) for composer in COMPOSERS]
        for entity in self.entities.values():
            self.declare_value(self.names.scalar_field_enum(entity.name), lambda e=entity.name: self.scalar_field_type(e))
            for composer in composers:
                composer.declare(entity)


class BoundSchema:
    """A registry slot bound by name: ``UserSchema.parse(payload)``."""

    def __init__(self, registry: SchemaRegistry, name: str):
        self.registry = registry
        self.name = name

    @property
    def model(self) -> Any:
        return self.registry.get(self.name)

    def validate(self, data: Any) -> Any:
        return self.registry.validate(self.name, data)

    def parse(self, data: Any) -> Any:
        return self.registry.parse(self.name, data)

    def safe_parse(self, data: Any) -> ParseResult:
        return self.registry.safe_parse(self.name, data)

    def __repr__(self) -> str:
        return f"<BoundSchema {self.name}>"
