"""
CarVault Backend — Car Request/Response Schemas
================================================

What:  Pydantic models defining the car API contract.
Why:   Strict validation of the tag payload and a single place where stored
       bytes become transport text (base64).
Who:   Used by CarService to build responses and by the cars routes for
       OpenAPI documentation.

Design Decision:
    Schemas are separate from SQLAlchemy models because the API exposes
    `tags` as a nested object while the table stores three flat columns,
    and images leave the API as base64 strings while the table stores bytes.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CarTags(BaseModel):
    """
    The fixed-shape tag record of a car.

    Unknown keys are ignored; known keys must be strings (or null). A client
    sending `{"car_type": 4}` gets a validation error rather than a silently
    stringified value.
    """
    car_type: Optional[str] = Field(default=None, description="Body style, e.g. SUV or sedan")
    company: Optional[str] = Field(default=None, description="Manufacturer")
    dealer: Optional[str] = Field(default=None, description="Dealer the car is listed with")

    model_config = ConfigDict(extra="ignore", strict=True)


class CarResponse(BaseModel):
    """
    What:  Full representation of a car as returned by every car endpoint.

    images: Each stored image, base64-encoded, in stored order. Clients that
            want to keep an image across an update send the same string back
            in `existing_images`.
    """
    id: uuid.UUID = Field(description="Unique car identifier (UUID)")
    owner_id: uuid.UUID = Field(description="Id of the user who owns the car")
    title: str = Field(description="Car title")
    description: str = Field(description="Free-text description")
    tags: CarTags = Field(description="Tag record used by keyword search")
    images: List[str] = Field(description="Base64-encoded image blobs, in order")
    created_at: datetime = Field(description="When the car was created (UTC)")


class DeleteResponse(BaseModel):
    message: str = Field(default="Car deleted")
