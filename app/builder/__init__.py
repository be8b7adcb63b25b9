from .query_builder import QueryBuilder, QueryBuilderConfig, QuerySpec, RESERVED_KEYS

__all__ = ["QueryBuilder", "QueryBuilderConfig", "QuerySpec", "RESERVED_KEYS"]
