"""Page-based pagination helpers for list queries."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Literal, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, ValidationInfo, field_validator

from .errors import PaginationError, issues_from_pydantic

T = TypeVar('T')

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class PageRequest(BaseModel):
    """One page of a list query, as received on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    page: StrictInt = Field(DEFAULT_PAGE, ge=1)
    limit: StrictInt = Field(DEFAULT_LIMIT, ge=1)
    sort_by: Optional[StrictStr] = Field(None, alias='sortBy')
    sort_order: Literal['asc', 'desc'] = Field('asc', alias='sortOrder')

    @field_validator('sort_order', mode='before')
    @classmethod
    def _default_order(cls, v: Any) -> Any:
        return 'asc' if v is None else v

    @field_validator('limit')
    @classmethod
    def _within_max(cls, v: int, info: ValidationInfo) -> int:
        max_limit = (info.context or {}).get('max_limit')
        if max_limit is not None and v > max_limit:
            raise ValueError(f"limit must be <= {max_limit}")
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, max_limit: int = MAX_LIMIT) -> 'PageRequest':
        """Build from a wire mapping (``page``, ``limit``, ``sortBy``, ``sortOrder``)."""
        try:
            return cls.model_validate(data, context={'max_limit': max_limit})
        except ValidationError as exc:
            issues = issues_from_pydantic(exc.errors(include_url=False))
            raise PaginationError(', '.join(f"{i.field}: {i.message}" for i in issues)) from exc


@dataclass
class PageResponse(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': self.items,
            'page': self.page,
            'limit': self.limit,
            'total': self.total,
            'totalPages': self.total_pages,
            'hasNext': self.has_next,
            'hasPrev': self.has_prev,
        }


def pagination_params(request: PageRequest) -> Dict[str, Any]:
    """``{skip, take, orderBy?}`` arguments for a find-many query."""
    params: Dict[str, Any] = {
        'skip': (request.page - 1) * request.limit,
        'take': request.limit,
    }
    if request.sort_by:
        params['orderBy'] = {request.sort_by: request.sort_order}
    return params


def create_page_response(items: List[T], total: int, request: PageRequest) -> PageResponse[T]:
    total_pages = math.ceil(total / request.limit) if total else 0
    return PageResponse(
        items=list(items),
        page=request.page,
        limit=request.limit,
        total=total,
        total_pages=total_pages,
        has_next=request.page < total_pages,
        has_prev=request.page > 1,
    )
