"""Base model shared by persisted configuration records."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Pydantic model serialised with camelCase keys.

    Records are read and written in the camelCase wire format used by the
    persisted JSON and backup files; Python code uses snake_case attributes.
    Unknown keys are kept so that fields added by newer clients survive a
    load/save cycle.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict:
        """Serialise to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
