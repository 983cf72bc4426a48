"""Base schema for the public JSON API.

The HTTP contract is camelCase (``teamId``, ``scheduledAt``) while Python
code stays snake_case; the alias generator bridges the two. Responses are
serialised by alias, requests accept either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
