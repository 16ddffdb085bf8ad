"""Base schemas and utilities."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire, which is what
    the browser UI and the JSON cells in the spreadsheet use.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict:
        """Dump with wire (camelCase) keys, leaving out unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
