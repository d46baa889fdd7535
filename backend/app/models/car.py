"""
CarVault Backend — Car SQLAlchemy Models
=========================================

What:  ORM models for the `cars` and `car_images` tables.
Why:   A car is the record users manage; its images are stored inline as
       binary blobs so a car and its pictures live and die together.
Who:   Used by CarService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    cars
    - owner_id: FK to users.id, set at creation and never changed
    - title / description: required free text
    - car_type / company / dealer: the fixed-shape tag record, flattened into
      nullable columns so keyword search is a plain OR of ILIKE predicates
    - created_at: list order (oldest first = insertion order)

    car_images
    - position: 0-based index inside the car's image sequence; the
      relationship is ordered by it so reads always return images in the
      order they were stored
    - data: raw bytes. Base64 only exists at the API boundary.
    - No unique (car_id, position) constraint: an update replaces the whole
      image set in one flush, and the unit of work inserts the new rows
      before deleting the orphaned ones.

Query Patterns:
    - List a user's cars: WHERE owner_id = :uid [AND (title ILIKE ... OR ...)]
      ORDER BY created_at → idx_cars_owner_created
    - Load images: SELECT ... WHERE car_id IN (...) ORDER BY position
      (selectin loading, one extra query per batch of cars)
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Car(Base):
    """
    A car record owned by exactly one user.

    Lifecycle:
        1. Created by its owner (images in upload order)
        2. Updated only by its owner; the image sequence is replaced as a whole
        3. Deleted only by its owner; images are removed with it
    """

    __tablename__ = "cars"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User who created the car; immutable",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Tags ──────────────────────────────────────────────────────────────
    car_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    dealer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )

    # selectin: async sessions cannot lazy-load, so images are fetched with
    # the car in a second batched query
    images: Mapped[List["CarImage"]] = relationship(
        back_populates="car",
        order_by="CarImage.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_cars_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Car(id={self.id}, owner_id={self.owner_id}, "
            f"title='{self.title}', images={len(self.images)})>"
        )


class CarImage(Base):
    """One image blob of a car, at a fixed position in its sequence."""

    __tablename__ = "car_images"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    car_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("cars.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    car: Mapped[Car] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<CarImage(car_id={self.car_id}, position={self.position}, size={len(self.data)})>"
