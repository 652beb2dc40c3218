"""Shared pydantic base for request bodies and Firestore documents.

Firestore documents and the JSON API both use camelCase field names;
Python code uses snake_case attributes.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document(self, **kwargs) -> dict:
        """Dump with camelCase keys, ready to write to Firestore."""
        return self.model_dump(by_alias=True, **kwargs)

    def changes(self) -> dict:
        """
        Only the fields the client actually sent, for partial updates.

        A null is treated as "not sent": required document fields and enum
        statuses can never be cleared through an update.
        """
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
