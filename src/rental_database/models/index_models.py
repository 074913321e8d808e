"""
Index descriptors.

`IndexDescriptor` normalizes an entry of `collection.list_indexes()` so the reconcilers can compare
live options against the declared ones without poking at raw dictionaries.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Text index options that disable stemming and the per-document language field lookup
TEXT_INDEX_DEFAULT_LANGUAGE = "none"
TEXT_INDEX_LANGUAGE_OVERRIDE = "_none"


class IndexDescriptor(BaseModel):
    """Live index as reported by the store.

    Attributes:
        name (str): Index name.
        key (List[Tuple[str, Any]]): Ordered key specification.
        expire_after_seconds (Optional[int]): TTL in seconds, for TTL indexes.
        default_language (Optional[str]): Text index default language.
        language_override (Optional[str]): Text index language field.
        weights (Dict[str, int]): Text index field weights.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    key: List[Tuple[str, Any]] = Field(default_factory=list)
    expire_after_seconds: Optional[int] = Field(None, alias="expireAfterSeconds")
    default_language: Optional[str] = None
    language_override: Optional[str] = None
    weights: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_index_info(cls, info: Dict[str, Any]) -> "IndexDescriptor":
        """Build a descriptor from a raw `list_indexes()` document."""
        data = dict(info)
        data["key"] = list(dict(data.get("key", {})).items())
        return cls.model_validate(data)

    @property
    def is_text(self) -> bool:
        return any(direction == "text" for _, direction in self.key) or "_fts" in dict(self.key)

    def has_text_fallback_options(self) -> bool:
        """Whether the index already disables language handling."""
        return (
            self.default_language == TEXT_INDEX_DEFAULT_LANGUAGE
            and self.language_override == TEXT_INDEX_LANGUAGE_OVERRIDE
        )


def find_index(indexes: List[IndexDescriptor], name: str) -> Optional[IndexDescriptor]:
    """Return the descriptor named `name`, if present."""
    return next((index for index in indexes if index.name == name), None)
