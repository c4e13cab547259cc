"""Pydantic schemas for Profiles."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProfileCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    timezone: Optional[str] = "UTC"
    is_active: bool = True


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    timezone: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str = Field(validation_alias="profile_id")
    name: str
    timezone: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TimezoneOut(BaseModel):
    timezone: str
    offset: str
