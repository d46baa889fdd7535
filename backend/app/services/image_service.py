"""
CarVault Backend — Car Image Service
=====================================

What:  Validates image blobs and converts them between storage and transport form.
Why:   Images are stored as raw bytes but travel as base64 text in JSON
       responses and in the `existing_images` field of an update. Keeping the
       conversion here means CarService only ever handles bytes.
Who:   Called by CarService on create and update, and when building responses.

Image Merge (update):
    The client re-sends the images it wants to keep, as the base64 strings it
    received, then uploads any new files:

        stored:   [A, B, C]
        kept:     [b64(A), b64(C)]        ← B dropped by omission
        new:      [D]
        result:   [A, C, D]               ← kept first, then new, order preserved

    Identical bytes are not deduplicated; sending b64(A) twice stores A twice.

Validation order (cheapest first):
    1. Count   — len(kept) + len(new) against max_images_per_car
    2. Decode  — strict base64 on each kept image
    3. Size    — every resulting blob against max_image_size
"""

import base64
import binascii
import logging
from typing import List, Optional, Sequence

from app.config import settings
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ImageService:
    """
    Stateless image rules for car records.

    Limits default to the application settings and can be overridden per
    instance (used in tests).
    """

    def __init__(self, max_images: Optional[int] = None, max_size: Optional[int] = None):
        self._max_images = max_images
        self._max_size = max_size

    @property
    def max_images(self) -> int:
        return self._max_images if self._max_images is not None else settings.max_images_per_car

    @property
    def max_size(self) -> int:
        return self._max_size if self._max_size is not None else settings.max_image_size

    def validate_count(self, count: int) -> None:
        """Raises ValidationError when a car would hold too many images."""
        if count > self.max_images:
            raise ValidationError(
                message=f"A car can hold at most {self.max_images} images (got {count})",
                field="images",
                context={"max_images": self.max_images, "count": count},
            )

    def validate_size(self, blob: bytes, index: int) -> None:
        """Raises ValidationError when one image is larger than allowed."""
        if len(blob) > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Image {index + 1} ({len(blob) / (1024 * 1024):.1f}MB) "
                    f"exceeds the maximum of {max_mb:.0f}MB"
                ),
                field="images",
                context={"index": index, "size": len(blob), "max_size": self.max_size},
            )

    def validate_reported_size(self, reported_size: Optional[int], index: int) -> None:
        """
        Reject an upload on its declared size, before any of it is read.

        The declared size may be missing or wrong; `validate_size` on the
        bytes actually read still applies afterwards.
        """
        if reported_size and reported_size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Image {index + 1} ({reported_size / (1024 * 1024):.1f}MB) "
                    f"exceeds the maximum of {max_mb:.0f}MB"
                ),
                field="images",
                context={"index": index, "reported_size": reported_size, "max_size": self.max_size},
            )

    def validate_images(self, blobs: Sequence[bytes]) -> None:
        """Count and per-image size checks for a complete image sequence."""
        self.validate_count(len(blobs))
        for index, blob in enumerate(blobs):
            self.validate_size(blob, index)

    def decode_kept_image(self, ref: str, index: int) -> bytes:
        """
        Decode one kept-image reference from its base64 transport form.

        Decoding is strict: characters outside the base64 alphabet or bad
        padding are a client error, not something to silently repair.
        """
        try:
            return base64.b64decode(ref, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(
                message=f"Existing image {index + 1} is not valid base64",
                field="existing_images",
                context={"index": index},
            )

    def merge_images(self, kept_refs: Sequence[str], new_blobs: Sequence[bytes]) -> List[bytes]:
        """
        Build the final image sequence for an update.

        Returns:
            [decoded kept images, in the order given] + [new blobs, in upload order]

        Raises:
            ValidationError: too many images, invalid base64, or an oversized image
        """
        self.validate_count(len(kept_refs) + len(new_blobs))

        merged = [self.decode_kept_image(ref, i) for i, ref in enumerate(kept_refs)]
        merged.extend(new_blobs)

        for index, blob in enumerate(merged):
            self.validate_size(blob, index)

        logger.debug(
            "Merged images: kept=%d new=%d total=%d",
            len(kept_refs),
            len(new_blobs),
            len(merged),
        )
        return merged

    @staticmethod
    def encode_image(blob: bytes) -> str:
        """Base64 transport form of a stored image."""
        return base64.b64encode(blob).decode("ascii")


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
