"""
Shared model base - snake_case in Python and storage, camelCase on the wire.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases for the mini-app."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
