from cardkeeper.models.card import CatalogCard
from cardkeeper.models.collection import CardCollection, CollectionType, LineItem
from cardkeeper.models.failure import (
    ApiResponse,
    FailureDetail,
    FailureKind,
    InvalidModificationError,
    InvalidPaginationError,
    InvalidSortFieldError,
    KnownError,
    NotFoundError,
    OutcomeType,
)
from cardkeeper.models.modification import QuantityModification, QuantityOperator
from cardkeeper.models.sorting import SortDirection, SortField

__all__ = [
    "ApiResponse",
    "CardCollection",
    "CatalogCard",
    "CollectionType",
    "FailureDetail",
    "FailureKind",
    "InvalidModificationError",
    "InvalidPaginationError",
    "InvalidSortFieldError",
    "KnownError",
    "LineItem",
    "NotFoundError",
    "OutcomeType",
    "QuantityModification",
    "QuantityOperator",
    "SortDirection",
    "SortField",
]
