from rental_database.models.index_models import IndexDescriptor, find_index
from rental_database.models.location_models import (
    LocationValueDocument,
    MultilingualDocument,
    ResolvedMultilingualDocument,
)

__all__ = [
    "IndexDescriptor",
    "LocationValueDocument",
    "MultilingualDocument",
    "ResolvedMultilingualDocument",
    "find_index",
]
