"""Pydantic schemas for Events.

Request bodies are deliberately loose: type coercion only. Every business
rule is checked by the validator so one response can list every problem.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventCreate(BaseModel):
    model_config = CAMEL

    title: Optional[str] = None
    description: Optional[str] = None
    profiles: Optional[list[str]] = None
    timezone: Optional[str] = None
    # ISO-8601 wall-clock (read in `timezone`), or with an offset / Z.
    start_date_time: Optional[str] = None
    end_date_time: Optional[str] = None
    created_by: Optional[str] = None


class EventUpdate(BaseModel):
    model_config = CAMEL

    title: Optional[str] = None
    description: Optional[str] = None
    profiles: Optional[list[str]] = None
    timezone: Optional[str] = None
    start_date_time: Optional[str] = None
    end_date_time: Optional[str] = None
    updated_by: Optional[str] = None


class ProfileSummary(BaseModel):
    model_config = CAMEL

    id: str
    name: Optional[str] = None


class ProfileDetail(ProfileSummary):
    timezone: str


class ChangeLogOut(BaseModel):
    model_config = CAMEL

    field: str
    old_value: Any = None
    new_value: Any = None
    updated_at: datetime
    updated_by: Optional[ProfileSummary] = None


class EventOut(BaseModel):
    model_config = CAMEL

    id: str
    title: str
    description: Optional[str] = None
    profiles: list[ProfileDetail] = []
    timezone: str
    start_date_time: datetime
    end_date_time: datetime
    display_timezone: str
    start_local: str
    end_local: str
    created_by: Optional[ProfileSummary] = None
    update_logs: list[ChangeLogOut] = []
    created_at: datetime
    updated_at: datetime


class EventDeleteOut(BaseModel):
    model_config = CAMEL

    message: str
    event: EventOut
