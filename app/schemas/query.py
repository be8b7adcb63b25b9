from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

class QueryParams(BaseModel):
    """Query-string parameters understood by the query builder.

    Recognized keys are declared below (``searchTerm``, ``sort``, ``page``,
    ``limit``, ``fields``); every other key is kept as a filter entry.
    """
    search_term: Optional[str] = Field(None, alias="searchTerm")
    sort: Optional[str] = None
    page: Optional[int] = Field(None, ge=1)
    limit: Optional[int] = Field(None, ge=1)
    select: Optional[str] = Field(None, alias="fields")

    class Config:
        extra = "allow"
        populate_by_name = True

    @property
    def filters(self) -> Dict[str, Any]:
        """Unrecognized keys in the order they were received"""
        return dict(self.model_extra or {})

class PaginationMeta(BaseModel):
    """Pagination summary for a filtered result set"""
    page: int
    limit: int
    total: int
    total_page: int
