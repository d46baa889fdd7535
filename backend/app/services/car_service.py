"""
CarVault Backend — Car Service (Record Lifecycle)
==================================================

What:  Create, list/search, fetch, update and delete car records.
Why:   Encapsulates the ownership rules and the image-merge update protocol
       in one place, independent of HTTP concerns.
How:   Receives an AsyncSession and the caller's identity for every call;
       validates input, talks to the ORM, and returns response schemas.
Who:   Called by the cars route handlers.

Ownership Rules:
    ┌────────────┬──────────────────────────────────────────────┐
    │ Operation  │ Record must be...                            │
    ├────────────┼──────────────────────────────────────────────┤
    │ create     │ — (owner = caller)                           │
    │ list       │ owned by caller (filter, never an error)     │
    │ get        │ existing AND owned, else NotFoundError       │
    │ update     │ existing AND owned, else NotFoundError       │
    │ delete     │ existing AND owned, else NotFoundError       │
    └────────────┴──────────────────────────────────────────────┘

    "Not owned" and "does not exist" are the same answer. A caller can never
    learn whether an id belongs to somebody else.

Error Handling Strategy:
    Application exceptions (ValidationError, NotFoundError) propagate as-is.
    SQLAlchemy failures are logged and wrapped in DatabaseError so the client
    gets a generic 500 without internal details. Nothing is retried.

Design Decision:
    CarService is stateless; the session and identity are arguments. The
    transaction boundary belongs to the caller (get_db_session commits or
    rolls back), which keeps every operation all-or-nothing.
"""

import json
import logging
import uuid
from typing import Any, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.car import Car, CarImage
from app.schemas.car import CarResponse, CarTags
from app.security import CurrentUser
from app.services.image_service import image_service

logger = logging.getLogger(__name__)

TagsInput = Union[CarTags, str, dict, None]


# ══════════════════════════════════════════════════════════════════════════
# Input helpers
# ══════════════════════════════════════════════════════════════════════════

def parse_tags(payload: TagsInput) -> CarTags:
    """
    Normalize a tag payload into a CarTags record.

    Accepts an existing CarTags, a dict, a JSON object string (what the
    update form sends), or None/"" for "no tags".

    Raises:
        ValidationError: malformed JSON, a JSON value that is not an object,
                         or tag values that are not strings.
    """
    if isinstance(payload, CarTags):
        return payload
    if payload is None:
        return CarTags()

    data: Any = payload
    if isinstance(payload, str):
        if not payload.strip():
            return CarTags()
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValidationError(
                message="Tags must be a JSON object",
                field="tags",
                context={"error": e.msg},
            )

    if not isinstance(data, dict):
        raise ValidationError(message="Tags must be a JSON object", field="tags")

    try:
        return CarTags.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Tag values must be text",
            field="tags",
            context={"errors": [err["loc"][0] for err in e.errors() if err.get("loc")]},
        )


def _require_text(value: Optional[str], field: str) -> str:
    """Title and description must contain something other than whitespace."""
    if value is None or not value.strip():
        raise ValidationError(message=f"{field.capitalize()} is required", field=field)
    return value


def _parse_car_id(car_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(car_id, uuid.UUID):
        return car_id
    try:
        return uuid.UUID(str(car_id))
    except ValueError:
        return None


def to_response(car: Car) -> CarResponse:
    """Serialize a Car; this is the only place stored bytes become base64."""
    return CarResponse(
        id=car.id,
        owner_id=car.owner_id,
        title=car.title,
        description=car.description,
        tags=CarTags(car_type=car.car_type, company=car.company, dealer=car.dealer),
        images=[image_service.encode_image(image.data) for image in car.images],
        created_at=car.created_at,
    )


def _build_images(blobs: Sequence[bytes]) -> List[CarImage]:
    return [CarImage(position=i, data=blob) for i, blob in enumerate(blobs)]


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════

class CarService:
    """
    Business logic layer for car records.

    Responsibilities:
        - create_car(): validate and persist a new car for the caller
        - list_cars():  the caller's cars, filtered by keyword
        - get_car():    one owned car
        - update_car(): replace fields and merge images
        - delete_car(): remove an owned car
    """

    async def _get_owned(self, db: AsyncSession, owner: CurrentUser, car_id: Union[str, uuid.UUID]) -> Car:
        """
        Fetch a car that exists AND belongs to `owner`.

        A malformed id cannot match any row, so it gets the same NotFoundError.
        """
        parsed_id = _parse_car_id(car_id)
        if parsed_id is None:
            raise NotFoundError(resource="car", resource_id=str(car_id))

        result = await db.execute(
            select(Car).where(Car.id == parsed_id, Car.owner_id == owner.id)
        )
        car = result.scalar_one_or_none()
        if car is None:
            raise NotFoundError(resource="car", resource_id=str(parsed_id))
        return car

    async def create_car(
        self,
        db: AsyncSession,
        owner: CurrentUser,
        title: Optional[str],
        description: Optional[str],
        tags: TagsInput = None,
        images: Sequence[bytes] = (),
    ) -> CarResponse:
        """
        Create a car owned by the caller.

        Args:
            db: Async database session
            owner: Authenticated caller; becomes the immutable owner
            title / description: Required, non-blank
            tags: Tag record (CarTags, dict, JSON string or None)
            images: Raw image bytes in upload order

        Raises:
            ValidationError: blank title/description, bad tags, too many or
                             oversized images
            DatabaseError: insert failed
        """
        title = _require_text(title, "title")
        description = _require_text(description, "description")
        parsed_tags = parse_tags(tags)
        image_service.validate_images(images)

        car = Car(
            owner_id=owner.id,
            title=title,
            description=description,
            car_type=parsed_tags.car_type,
            company=parsed_tags.company,
            dealer=parsed_tags.dealer,
            images=_build_images(images),
        )

        try:
            db.add(car)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating car for %s: %s", owner.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the car. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Car %s created by %s with %d images", car.id, owner.id, len(images))
        return to_response(car)

    async def list_cars(
        self,
        db: AsyncSession,
        owner: CurrentUser,
        keyword: Optional[str] = None,
    ) -> List[CarResponse]:
        """
        List the caller's cars, optionally filtered by keyword.

        Search predicate:
            keyword is a case-insensitive substring of ANY of
            title, description, car_type, company, dealer.
            LIKE wildcards in the keyword (% and _) are escaped, so they
            match literally. Only a missing or empty keyword matches every
            owned car; a whitespace keyword is searched for like any other.

        Order: creation time, oldest first (car id as tiebreaker).
        """
        query = select(Car).where(Car.owner_id == owner.id)

        # Whitespace is part of the search text; only None and "" mean "no filter"
        if keyword:
            query = query.where(
                or_(
                    Car.title.icontains(keyword, autoescape=True),
                    Car.description.icontains(keyword, autoescape=True),
                    Car.car_type.icontains(keyword, autoescape=True),
                    Car.company.icontains(keyword, autoescape=True),
                    Car.dealer.icontains(keyword, autoescape=True),
                )
            )

        # id breaks ties between cars created within the same clock tick
        query = query.order_by(Car.created_at.asc(), Car.id.asc())

        try:
            result = await db.execute(query)
            cars = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing cars: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve cars. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [to_response(car) for car in cars]

    async def get_car(
        self,
        db: AsyncSession,
        owner: CurrentUser,
        car_id: Union[str, uuid.UUID],
    ) -> CarResponse:
        """
        Fetch one of the caller's cars with images as base64.

        Raises:
            NotFoundError: no such car, or it belongs to another user
        """
        try:
            car = await self._get_owned(db, owner, car_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching car %s: %s", car_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the car. Please try again.",
                context={"car_id": str(car_id)},
            )
        return to_response(car)

    async def update_car(
        self,
        db: AsyncSession,
        owner: CurrentUser,
        car_id: Union[str, uuid.UUID],
        title: Optional[str],
        description: Optional[str],
        tags: TagsInput,
        kept_images: Sequence[str] = (),
        new_images: Sequence[bytes] = (),
    ) -> CarResponse:
        """
        Replace a car's fields and image sequence.

        Workflow:
            1. Load the car (must exist AND be owned → else NotFoundError)
            2. Validate title/description and parse tags
            3. Merge images: decoded kept images, then new uploads
            4. Assign everything and flush; id and owner never change

        Nothing is written unless every step succeeds.

        Raises:
            NotFoundError: missing or not owned
            ValidationError: blank fields, malformed tags, bad base64,
                             image count/size limits
            DatabaseError: flush failed
        """
        try:
            car = await self._get_owned(db, owner, car_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading car %s for update: %s", car_id, str(e))
            raise DatabaseError(
                message="Could not update the car. Please try again.",
                context={"car_id": str(car_id)},
            )

        title = _require_text(title, "title")
        description = _require_text(description, "description")
        if tags is None:
            # An update replaces the whole tag record; omitting it is an error,
            # not an implicit "clear all tags"
            raise ValidationError(message="Tags are required", field="tags")
        parsed_tags = parse_tags(tags)
        merged = image_service.merge_images(kept_images, new_images)

        car.title = title
        car.description = description
        car.car_type = parsed_tags.car_type
        car.company = parsed_tags.company
        car.dealer = parsed_tags.dealer
        # Replacing the collection orphans the previous CarImage rows, which
        # the delete-orphan cascade removes on flush
        car.images = _build_images(merged)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating car %s: %s", car.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the car. Please try again.",
                context={"car_id": str(car.id), "error_type": type(e).__name__},
            )

        logger.info(
            "Car %s updated by %s: kept=%d new=%d",
            car.id,
            owner.id,
            len(kept_images),
            len(new_images),
        )
        return to_response(car)

    async def delete_car(
        self,
        db: AsyncSession,
        owner: CurrentUser,
        car_id: Union[str, uuid.UUID],
    ) -> None:
        """
        Permanently delete one of the caller's cars and its images.

        A second delete of the same id raises NotFoundError.
        """
        try:
            car = await self._get_owned(db, owner, car_id)
            await db.delete(car)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting car %s: %s", car_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the car. Please try again.",
                context={"car_id": str(car_id)},
            )

        logger.info("Car %s deleted by %s", car.id, owner.id)


# ── Singleton Instance ────────────────────────────────────────────────────
car_service = CarService()
