"""Error types raised by StockQL.

Validation failures are reported as :class:`SchemaValidationError` carrying a
flat list of :class:`ValidationIssue` records. Pydantic errors raised deep
inside lazily resolved relation payloads are unwrapped into the same flat list
with their full path.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

__all__ = [
    'StockQLError',
    'SchemaValidationError',
    'SchemaNotFoundError',
    'SchemaDefinitionError',
    'PaginationError',
    'UpdateOperationError',
    'ValidationIssue',
    'IssueCode',
    'issues_from_pydantic',
]

PathItem = Union[str, int]


class IssueCode:
    MISSING_REQUIRED_FIELD = 'missing_required_field'
    TYPE_MISMATCH = 'type_mismatch'
    INVALID_ENUM_VALUE = 'invalid_enum_value'
    NO_MATCHING_UNION_BRANCH = 'no_matching_union_branch'
    NESTED_VALIDATION_FAILURE = 'nested_validation_failure'
    UNRECOGNIZED_KEY = 'unrecognized_key'
    INVALID_UPDATE_OPERATION = 'invalid_update_operation'
    CONFLICTING_PROJECTION = 'conflicting_projection'


# custom error types raised by our validators, passed through untouched
_PASSTHROUGH = {
    IssueCode.NO_MATCHING_UNION_BRANCH,
    IssueCode.INVALID_UPDATE_OPERATION,
    IssueCode.CONFLICTING_PROJECTION,
}

_ENUM_TYPES = {'enum', 'literal_error'}


class StockQLError(Exception):
    """Base error with a stable machine code and an HTTP-ish status."""

    def __init__(self, message: str, code: str = 'STOCKQL_ERROR', status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': type(self).__name__,
            'message': self.message,
            'code': self.code,
            'statusCode': self.status_code,
        }


@dataclass
class ValidationIssue:
    code: str
    path: Tuple[PathItem, ...]
    message: str
    value: Any = None
    cause: Optional[str] = None

    @property
    def field(self) -> str:
        return format_path(self.path) or 'general'

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'code': self.code,
            'field': self.field,
            'path': list(self.path),
            'message': self.message,
        }
        if self.cause is not None:
            out['cause'] = self.cause
        return out


class SchemaValidationError(StockQLError):
    """A payload did not validate against a named schema."""

    def __init__(self, schema: str, issues: Sequence[ValidationIssue]):
        self.schema = schema
        self.issues: List[ValidationIssue] = list(issues)
        message = ', '.join(f"{i.field}: {i.message}" for i in self.issues) or f"{schema} validation failed"
        super().__init__(message, 'VALIDATION_ERROR', 400)

    @property
    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out['schema'] = self.schema
        out['errors'] = [i.to_dict() for i in self.issues]
        return out

    @classmethod
    def from_pydantic(cls, schema: str, exc: ValidationError, known_names: Iterable[str] = ()) -> 'SchemaValidationError':
        return cls(schema, issues_from_pydantic(exc.errors(include_url=False), known_names=known_names))


class SchemaNotFoundError(StockQLError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"Unknown schema: {name}", 'SCHEMA_NOT_FOUND', 500)
        self.name = name

    def __str__(self) -> str:
        return self.message


class SchemaDefinitionError(StockQLError):
    def __init__(self, message: str):
        super().__init__(message, 'SCHEMA_DEFINITION_ERROR', 500)


class PaginationError(StockQLError):
    def __init__(self, message: str):
        super().__init__(message, 'BAD_REQUEST', 400)


class UpdateOperationError(StockQLError, ValueError):
    """An update operation that cannot be applied to a field."""

    def __init__(self, message: str):
        super().__init__(message, 'INVALID_UPDATE_OPERATION', 400)


def format_path(path: Iterable[PathItem]) -> str:
    out = ''
    for item in path:
        if isinstance(item, int):
            out += f"[{item}]"
        else:
            out = f"{out}.{item}" if out else str(item)
    return out


# Union member labels never carry wire meaning
_UNION_TAGS = {'str', 'int', 'float', 'bool', 'datetime', 'list', 'dict', 'none', 'literal', 'any'}


def clean_loc(loc: Iterable[PathItem], known_names: Iterable[str] = ()) -> Tuple[PathItem, ...]:
    """Drop union member labels from a pydantic location tuple."""
    known = set(known_names)
    out: List[PathItem] = []
    for item in loc:
        if isinstance(item, str):
            if item.startswith('~') or '[' in item or item in known or item in _UNION_TAGS:
                continue
        out.append(item)
    return tuple(out)


def _classify(error: Dict[str, Any]) -> Tuple[str, str]:
    etype = error.get('type', '')
    ctx = error.get('ctx') or {}
    if etype == 'missing':
        return IssueCode.MISSING_REQUIRED_FIELD, ''
    if etype in _ENUM_TYPES:
        expected = ctx.get('expected', '')
        return IssueCode.INVALID_ENUM_VALUE, f"Invalid enum value. Expected {expected}, received {error.get('input')!r}"
    if etype == 'extra_forbidden':
        return IssueCode.UNRECOGNIZED_KEY, 'Unrecognized key'
    if etype in _PASSTHROUGH:
        return etype, error.get('msg', '')
    return IssueCode.TYPE_MISMATCH, error.get('msg', '')


def issues_from_pydantic(
    errors: Iterable[Dict[str, Any]],
    prefix: Tuple[PathItem, ...] = (),
    *,
    relation: bool = False,
    known_names: Iterable[str] = (),
) -> List[ValidationIssue]:
    """Flatten pydantic error dicts, unwrapping nested schema failures.

    Errors crossing a relation boundary keep their leaf code as ``cause`` and
    are reported as ``nested_validation_failure``.
    """
    known = tuple(known_names)
    issues: List[ValidationIssue] = []
    seen = set()
    for error in errors:
        path = prefix + clean_loc(error.get('loc', ()), known)
        if error.get('type') == IssueCode.NESTED_VALIDATION_FAILURE:
            ctx = error.get('ctx') or {}
            nested = issues_from_pydantic(
                ctx.get('errors') or (),
                path,
                relation=relation or bool(ctx.get('relation')),
                known_names=known,
            )
            for issue in nested:
                key = (issue.code, issue.path, issue.message)
                if key not in seen:
                    seen.add(key)
                    issues.append(issue)
            continue
        code, message = _classify(error)
        if code == IssueCode.MISSING_REQUIRED_FIELD:
            message = f"{format_path(path) or 'value'} is required"
        issue = ValidationIssue(code=code, path=path, message=message, value=error.get('input'))
        if relation:
            issue.cause = issue.code
            issue.code = IssueCode.NESTED_VALIDATION_FAILURE
        key = (issue.code, issue.path, issue.message)
        if key not in seen:
            seen.add(key)
            issues.append(issue)
    return issues
