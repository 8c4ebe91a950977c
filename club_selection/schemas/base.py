# club_selection/schemas/base.py - Shared schema configuration
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, AfterValidator
from pydantic.alias_generators import to_camel

from club_selection.models.base import as_utc

# Timestamps leave the API as timezone-aware UTC
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
