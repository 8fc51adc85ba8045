"""Base pydantic model for documents crossing the store boundary.

Documents are stored with camelCase keys; Python code uses snake_case
attributes.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model that validates from either key style and dumps camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Dump for storage (camelCase keys, Python datetimes preserved)."""
        return self.model_dump(by_alias=True)
