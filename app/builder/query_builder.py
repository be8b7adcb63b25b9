import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from math import ceil
from typing import Any, Dict, FrozenSet, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import ValidationError
from sqlalchemy import inspect, or_
from sqlalchemy.orm import Query, load_only

from app.core.config import Settings, get_settings
from app.core.exceptions import BadRequestException
from app.db import Base
from app.schemas.query import QueryParams, PaginationMeta
from app.utils.like import LIKE_ESCAPE, escape_like

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

RESERVED_KEYS: FrozenSet[str] = frozenset({"searchTerm", "sort", "page", "limit", "fields"})

@dataclass(frozen=True)
class QueryBuilderConfig:
    """Defaults and reserved keys shared by every query builder"""
    default_page: int = 1
    default_limit: int = 10
    default_sort: str = "-created_at"
    reserved_keys: FrozenSet[str] = RESERVED_KEYS
    # Columns left out of results when no explicit field selection is given
    hidden_fields: Tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QueryBuilderConfig":
        settings = settings or get_settings()
        return cls(
            default_page=settings.DEFAULT_PAGE,
            default_limit=settings.DEFAULT_PAGE_LIMIT,
            default_sort=settings.DEFAULT_SORT,
        )

@dataclass(frozen=True)
class QuerySpec:
    """Everything a builder has collected so far, applied only in build()"""
    criteria: Tuple[Any, ...] = ()
    order_by: Tuple[Any, ...] = ()
    load_options: Tuple[Any, ...] = ()
    page: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

def _coerce(column, value: Any) -> Any:
    """Convert a raw query-string value to the column's Python type"""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type):
        return value
    if python_type is bool:
        return str(value).strip().lower() in ("true", "1", "yes")
    if python_type is datetime:
        return datetime.fromisoformat(str(value))
    if python_type is date:
        return date.fromisoformat(str(value)[:10])
    return python_type(value)

class QueryBuilder(Generic[ModelType]):
    """Immutable, chainable search/filter/sort/paginate/fields builder.

    Every stage returns a new builder and nothing touches the database until
    ``build()`` (or ``all()`` / ``count_total()``) is called, so stages can be
    chained in any order:

        QueryBuilder(Movie, db.query(Movie), {"searchTerm": "dune", "page": 2})
            .search(["title", "description"])
            .filter()
            .paginate()
            .sort()
            .fields()
            .all()
    """

    def __init__(
        self,
        model: Type[ModelType],
        query: Query,
        params: Union[QueryParams, Mapping[str, Any], None] = None,
        config: Optional[QueryBuilderConfig] = None,
        spec: Optional[QuerySpec] = None,
    ):
        self.model = model
        self.query = query
        self.params = params if isinstance(params, QueryParams) else self._parse_params(params)
        self.config = config or QueryBuilderConfig.from_settings()
        self.spec = spec or QuerySpec()

        mapper = inspect(model)
        self._columns: Dict[str, Any] = {attr.key: getattr(model, attr.key) for attr in mapper.column_attrs}
        self._primary_keys: List[str] = [mapper.get_property_by_column(col).key for col in mapper.primary_key]

    @staticmethod
    def _parse_params(params: Optional[Mapping[str, Any]]) -> QueryParams:
        try:
            return QueryParams.model_validate(dict(params or {}))
        except ValidationError as e:
            fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
            raise BadRequestException(f"Invalid query parameters: {fields}")

    def _evolve(self, **changes) -> "QueryBuilder[ModelType]":
        return QueryBuilder(self.model, self.query, self.params, self.config, replace(self.spec, **changes))

    def _column(self, name: str):
        column = self._columns.get(name)
        if column is None:
            raise ValueError(f"{self.model.__name__} has no column '{name}'")
        return column

    def where(self, *criteria) -> "QueryBuilder[ModelType]":
        """Add raw SQLAlchemy conditions"""
        if not criteria:
            return self
        return self._evolve(criteria=self.spec.criteria + tuple(criteria))

    def options(self, *load_options) -> "QueryBuilder[ModelType]":
        """Add loader options, e.g. selectinload() to populate relations"""
        if not load_options:
            return self
        return self._evolve(load_options=self.spec.load_options + tuple(load_options))

    def search(self, fields: Iterable[str]) -> "QueryBuilder[ModelType]":
        """Case-insensitive partial match of ``searchTerm`` on any of ``fields``"""
        term = self.params.search_term
        if not term:
            return self
        pattern = f"%{escape_like(term)}%"
        conditions = [self._column(name).ilike(pattern, escape=LIKE_ESCAPE) for name in fields]
        if not conditions:
            return self
        return self.where(or_(*conditions))

    def filter(self, excluded_keys: Iterable[str] = ()) -> "QueryBuilder[ModelType]":
        """Exact-match conditions for every non-reserved, non-excluded key"""
        excluded = set(self.config.reserved_keys) | set(excluded_keys)
        conditions = []
        for key, value in self.params.filters.items():
            if key in excluded:
                continue
            column = self._columns.get(key)
            if column is None:
                logger.debug(f"Ignoring filter on unknown field '{key}' for {self.model.__name__}")
                continue
            try:
                conditions.append(column == _coerce(column, value))
            except (TypeError, ValueError):
                raise BadRequestException(f"Invalid value for '{key}': {value!r}")
        return self.where(*conditions)

    def paginate(self) -> "QueryBuilder[ModelType]":
        page = self.params.page or self.config.default_page
        limit = self.params.limit or self.config.default_limit
        return self._evolve(page=page, limit=limit, offset=(page - 1) * limit)

    def sort(self) -> "QueryBuilder[ModelType]":
        """Order by comma-separated fields; a leading '-' sorts descending"""
        raw = self.params.sort or self.config.default_sort
        ordering: List[Tuple[str, bool]] = []
        for token in raw.split(","):
            token = token.strip()
            descending = token.startswith("-")
            name = token[1:] if descending else token
            if not name:
                continue
            if name not in self._columns:
                logger.debug(f"Ignoring sort on unknown field '{name}' for {self.model.__name__}")
                continue
            ordering.append((name, descending))

        # Stable pages need a total order
        sorted_names = {name for name, _ in ordering}
        tie_break_desc = ordering[0][1] if ordering else False
        for pk in self._primary_keys:
            if pk not in sorted_names:
                ordering.append((pk, tie_break_desc))

        clauses = tuple(
            self._columns[name].desc() if descending else self._columns[name].asc()
            for name, descending in ordering
        )
        return self._evolve(order_by=clauses)

    def fields(self) -> "QueryBuilder[ModelType]":
        """Restrict loaded columns to ``fields``; '-name' excludes a column"""
        if self.params.select:
            tokens = [t.strip() for t in self.params.select.split(",") if t.strip()]
            included = [t for t in tokens if not t.startswith("-")]
            excluded = {t[1:] for t in tokens if t.startswith("-")}
            if included:
                names = [n for n in included if n in self._columns and n not in excluded]
            else:
                names = [n for n in self._columns if n not in excluded]
        elif self.config.hidden_fields:
            hidden = set(self.config.hidden_fields)
            names = [n for n in self._columns if n not in hidden]
        else:
            return self

        if not names:
            return self
        return self.options(load_only(*[self._columns[n] for n in names]))

    def build(self) -> Query:
        """Compose the final ORM query"""
        query = self.query
        if self.spec.criteria:
            query = query.filter(*self.spec.criteria)
        if self.spec.order_by:
            query = query.order_by(*self.spec.order_by)
        if self.spec.load_options:
            query = query.options(*self.spec.load_options)
        if self.spec.offset:
            query = query.offset(self.spec.offset)
        if self.spec.limit is not None:
            query = query.limit(self.spec.limit)
        return query

    def all(self) -> List[ModelType]:
        return self.build().all()

    def count_total(self) -> PaginationMeta:
        """Pagination meta for the filtered query, ignoring page and limit"""
        query = self.query
        if self.spec.criteria:
            query = query.filter(*self.spec.criteria)
        total = query.order_by(None).count()
        page = self.spec.page or self.params.page or self.config.default_page
        limit = self.spec.limit or self.params.limit or self.config.default_limit
        return PaginationMeta(page=page, limit=limit, total=total, total_page=ceil(total / limit))
