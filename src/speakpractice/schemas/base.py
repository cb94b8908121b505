"""Shared pydantic base for models that cross the HTTP boundary."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialized with camelCase keys on the wire.

    Python code addresses fields by their snake_case names; JSON payloads
    use the camelCase aliases.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
