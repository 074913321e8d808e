"""
Typed views over the multilingual documents stored in MongoDB.

`Location` and `Country` documents both hold an ordered `values` list of ObjectIds pointing at
`LocationValue` documents, one per supported language. The models below validate raw store
documents at the boundary so the synchronizer never works on unexpected shapes.
"""

from typing import Any, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

ENGLISH = "en"


def normalize_language(code: Any) -> str:
    """Canonical form of a stored language code (`" EN"` -> `"en"`)."""
    return str(code).strip().lower() if code is not None else ""


class LocationValueDocument(BaseModel):
    """A single localized label.

    Attributes:
        id (ObjectId): Document `_id`.
        language (str): Two-letter language code.
        value (str): Localized text.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId = Field(..., alias="_id", description="Document id")
    language: str = Field(..., min_length=1, description="Language code")
    value: str = Field(..., description="Localized text")

    @field_validator("language")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return normalize_language(v)


class MultilingualDocument(BaseModel):
    """A `Location` or `Country` document, reduced to what language sync needs.

    Attributes:
        id (ObjectId): Document `_id`.
        values (List[ObjectId]): Ordered references to `LocationValue` documents.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True, extra="allow")

    id: ObjectId = Field(..., alias="_id", description="Document id")
    values: List[ObjectId] = Field(default_factory=list, description="LocationValue references")


class ResolvedMultilingualDocument(BaseModel):
    """A multilingual parent with its `values` references resolved to documents.

    Attributes:
        document (MultilingualDocument): The parent as stored.
        values (List[LocationValueDocument]): Resolved values, in reference order.
        dangling (List[ObjectId]): References that matched no `LocationValue` document.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    document: MultilingualDocument
    values: List[LocationValueDocument] = Field(default_factory=list)
    dangling: List[ObjectId] = Field(default_factory=list)

    @property
    def id(self) -> ObjectId:
        return self.document.id

    def value_for(self, language: str) -> Optional[LocationValueDocument]:
        """Return the first value in `language`, if any."""
        return next((v for v in self.values if v.language == language), None)

    @property
    def english(self) -> Optional[LocationValueDocument]:
        return self.value_for(ENGLISH)

    def missing_languages(self, languages: List[str]) -> List[str]:
        """Configured languages this parent has no value for, in configured order."""
        present = {v.language for v in self.values}
        return [language for language in languages if language not in present]
