"""Time-block data models: staff reservations of calendar time."""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from hvac_scheduler.catalog import block_type_color
from hvac_scheduler.schemas.base import PartialWindowModel, TimeWindowModel
from hvac_scheduler.schemas.enums import BlockType

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000


class TimeBlockFields(TimeWindowModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    block_type: BlockType = BlockType.INTERNAL
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)
    color: Optional[str] = None

    @model_validator(mode="after")
    def fill_default_color(self) -> "TimeBlockFields":
        if not self.color:
            self.color = block_type_color(self.block_type)
        return self


class TimeBlockCreate(TimeBlockFields):
    """Body of a create request."""
    created_by: Optional[str] = None


class TimeBlock(TimeBlockFields):
    """A persisted time block. ``notes`` are internal and never shown to customers."""
    id: str = Field(alias="_id")
    version: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TimeBlockUpdate(PartialWindowModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    block_type: Optional[BlockType] = None
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)
    color: Optional[str] = None
