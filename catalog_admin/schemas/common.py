from typing import Optional, Any, Dict, List, Tuple
from math import ceil
from pydantic import BaseModel


class ResponseModel(BaseModel):
    """Standard API response model"""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[Dict[str, Any]] = None


class PaginationModel(BaseModel):
    """Pagination metadata"""
    currentPage: int
    totalPages: int
    totalItems: int
    itemsPerPage: int
    hasNext: bool
    hasPrev: bool

    @classmethod
    def for_page(cls, page: int, limit: int, total: int) -> "PaginationModel":
        total_pages = ceil(total / limit) if limit > 0 else 0
        return cls(
            currentPage=page,
            totalPages=total_pages,
            totalItems=total,
            itemsPerPage=limit,
            hasNext=page < total_pages,
            hasPrev=page > 1,
        )


def paginate(items: List[Any], page: int, limit: int) -> Tuple[List[Any], PaginationModel]:
    """Slice an already fetched list; the remote listing is not paginated"""
    start = (page - 1) * limit
    return items[start:start + limit], PaginationModel.for_page(page, limit, len(items))
