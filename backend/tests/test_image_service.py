"""
CarVault Backend — Image Service Unit Tests
============================================

What we test:
    ✅ Count limit (10 by default, boundary included)
    ✅ Per-image size limit
    ✅ Merge order: kept images first, then new uploads
    ✅ Strict base64 decoding of kept images
    ✅ Limits apply to the merged result, not to each half
"""

import base64

import pytest

from app.exceptions import ValidationError
from app.services.image_service import ImageService


def b64(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


class TestImageValidation:
    """Tests for count and size limits."""

    def setup_method(self):
        self.service = ImageService(max_images=10, max_size=1024)

    def test_ten_images_allowed(self):
        self.service.validate_images([b"x"] * 10)

    def test_eleven_images_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_images([b"x"] * 11)
        assert exc_info.value.field == "images"
        assert exc_info.value.context["count"] == 11

    def test_empty_sequence_allowed(self):
        self.service.validate_images([])

    def test_image_at_size_limit_allowed(self):
        self.service.validate_size(b"a" * 1024, 0)

    def test_oversized_image_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_images([b"ok", b"a" * 1025])
        assert exc_info.value.context["index"] == 1

    def test_defaults_come_from_settings(self):
        service = ImageService()
        assert service.max_images == 10
        assert service.max_size == 5 * 1024 * 1024


class TestImageMerge:
    """Tests for the update-time merge of kept and new images."""

    def setup_method(self):
        self.service = ImageService(max_images=10, max_size=1024)

    def test_kept_then_new(self):
        merged = self.service.merge_images([b64(b"A"), b64(b"C")], [b"D"])
        assert merged == [b"A", b"C", b"D"]

    def test_kept_order_is_request_order(self):
        merged = self.service.merge_images([b64(b"B"), b64(b"A")], [])
        assert merged == [b"B", b"A"]

    def test_nothing_kept_nothing_new_clears_images(self):
        assert self.service.merge_images([], []) == []

    def test_duplicates_are_kept(self):
        merged = self.service.merge_images([b64(b"A"), b64(b"A")], [])
        assert merged == [b"A", b"A"]

    def test_invalid_base64_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.merge_images([b64(b"A"), "not base64!!"], [])
        assert exc_info.value.field == "existing_images"
        assert exc_info.value.context["index"] == 1

    def test_bad_padding_rejected(self):
        with pytest.raises(ValidationError):
            self.service.merge_images(["QQ"], [])

    def test_count_limit_applies_to_merged_total(self):
        kept = [b64(b"k")] * 6
        new = [b"n"] * 5
        with pytest.raises(ValidationError) as exc_info:
            self.service.merge_images(kept, new)
        assert exc_info.value.context["count"] == 11

    def test_oversized_kept_image_rejected(self):
        with pytest.raises(ValidationError):
            self.service.merge_images([b64(b"a" * 2048)], [])


class TestImageEncoding:

    def test_encode_is_standard_base64(self):
        assert ImageService.encode_image(b"\xff\xd8\xff") == "/9j/"

    def test_encoded_image_can_be_kept(self):
        service = ImageService()
        ref = service.encode_image(b"\x00\x01binary\xfe")
        assert service.merge_images([ref], []) == [b"\x00\x01binary\xfe"]
