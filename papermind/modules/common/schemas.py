"""Shared pydantic building blocks."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for public schemas: camelCase on the wire, snake_case in Python.

    Input accepts either spelling; unknown fields are ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TimestampSchema(CamelModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
