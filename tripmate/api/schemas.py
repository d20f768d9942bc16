"""Request payload models.

The client posts camelCase keys; every model accepts those as aliases and
also the snake_case field names.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from tripmate.api.models import POST_STATUSES, TRANSPORT_MODES

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
City = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]
Bio = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=1000)]
TravelTime = Annotated[str, StringConstraints(strip_whitespace=True, pattern=TIME_PATTERN)]
Notes = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
CommentText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
MessageText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
# live relay text; the length cap comes from the websocket config
RelayText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

TransportMode = Literal[TRANSPORT_MODES]
PostStatus = Literal[POST_STATUSES]


def blank_to_none(value):
    """Form fields arrive as empty strings when left unfilled."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def ensure_future(value: Optional[dt.date]) -> Optional[dt.date]:
    if value is not None and value <= dt.date.today():
        raise ValueError("Travel date must be in the future")
    return value


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterPayload(Payload):
    name: Name
    email: Email
    password: str = Field(min_length=6, max_length=128)
    city: City
    age: int = Field(ge=18, le=100)
    phone: Optional[Phone] = None
    bio: Optional[Bio] = None

    @field_validator("phone", "bio", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return blank_to_none(value)


class LoginPayload(Payload):
    email: Email
    password: str = Field(min_length=1)


class ProfileUpdatePayload(Payload):
    name: Optional[Name] = None
    city: Optional[City] = None
    age: Optional[int] = Field(default=None, ge=18, le=100)
    phone: Optional[Phone] = None
    bio: Optional[Bio] = None

    @field_validator("age", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return blank_to_none(value)


class PostCreatePayload(Payload):
    title: Title
    description: Description
    from_city: City = Field(alias="fromCity")
    to_city: City = Field(alias="toCity")
    travel_date: dt.date = Field(alias="travelDate")
    travel_time: TravelTime = Field(alias="travelTime")
    max_participants: int = Field(default=2, ge=2, le=10, alias="maxParticipants")
    transport_mode: TransportMode = Field(default="car", alias="transportMode")
    estimated_cost: Optional[float] = Field(default=None, ge=0, alias="estimatedCost")
    notes: Optional[Notes] = None

    @field_validator("estimated_cost", "notes", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return blank_to_none(value)

    @field_validator("travel_date")
    @classmethod
    def travel_date_in_future(cls, value):
        return ensure_future(value)


class PostUpdatePayload(Payload):
    title: Optional[Title] = None
    description: Optional[Description] = None
    from_city: Optional[City] = Field(default=None, alias="fromCity")
    to_city: Optional[City] = Field(default=None, alias="toCity")
    travel_date: Optional[dt.date] = Field(default=None, alias="travelDate")
    travel_time: Optional[TravelTime] = Field(default=None, alias="travelTime")
    max_participants: Optional[int] = Field(default=None, ge=2, le=10, alias="maxParticipants")
    transport_mode: Optional[TransportMode] = Field(default=None, alias="transportMode")
    estimated_cost: Optional[float] = Field(default=None, ge=0, alias="estimatedCost")
    notes: Optional[Notes] = None

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return blank_to_none(value)

    @field_validator("travel_date")
    @classmethod
    def travel_date_in_future(cls, value):
        return ensure_future(value)


class PostQuery(Payload):
    from_city: Optional[str] = Field(default=None, alias="fromCity")
    to_city: Optional[str] = Field(default=None, alias="toCity")
    travel_date: Optional[dt.date] = Field(default=None, alias="date")
    status: Optional[PostStatus] = None
    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("from_city", "to_city", "travel_date", "status", "limit", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return blank_to_none(value)


class CommentPayload(Payload):
    text: CommentText


class MessagePayload(Payload):
    content: MessageText


class SocketMessagePayload(Payload):
    receiver_id: str = Field(min_length=1, alias="receiverId")
    message: RelayText
    sender_id: Optional[str] = Field(default=None, alias="senderId")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
