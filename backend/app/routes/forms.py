"""
CarVault Backend — Multipart Form Helpers
==========================================

What:  Pull list-valued and nested fields out of a multipart form, and read
       uploaded files into bytes.
Why:   Browsers encode arrays and nested objects in form field NAMES, which
       FastAPI's Form() parameters cannot declare:

           existing_images            ← repeated key
           existing_images[]          ← PHP/Rails style
           existing_images[0], [1]..  ← explicit index (ordered by index)
           tags[car_type], tags[company], tags[dealer]

Who:   Used by the cars routes only.
"""

import re
from typing import Dict, List, Optional, Sequence, Union

from fastapi import UploadFile
from starlette.datastructures import FormData

from app.services.image_service import image_service

TAG_FIELDS = ("car_type", "company", "dealer")


def collect_list_field(form: FormData, name: str) -> List[str]:
    """
    Gather the text values of a list-valued field.

    Order: plain repeated keys, then `name[]` keys, then `name[N]` keys
    sorted by N. File parts under these names are ignored.
    """
    plain = [v for v in form.getlist(name) if isinstance(v, str)]
    bracketed = [v for v in form.getlist(f"{name}[]") if isinstance(v, str)]

    pattern = re.compile(rf"{re.escape(name)}\[(\d+)\]")
    indexed = []
    for key, value in form.multi_items():
        match = pattern.fullmatch(key)
        if match and isinstance(value, str):
            indexed.append((int(match.group(1)), value))
    indexed.sort(key=lambda item: item[0])

    return plain + bracketed + [value for _, value in indexed]


def collect_tags(form: FormData, tags_json: Optional[str]) -> Union[str, Dict[str, str], None]:
    """
    Return the tag payload of a car form.

    A `tags` JSON string wins; otherwise `tags[<field>]` keys are gathered
    into a dict. None when the form carries no tag information at all.
    """
    if tags_json is not None:
        return tags_json

    nested = {}
    for field in TAG_FIELDS:
        value = form.get(f"tags[{field}]")
        if isinstance(value, str):
            nested[field] = value
    return nested or None


def _is_blank_part(upload: UploadFile) -> bool:
    # What a browser sends for an untouched <input type="file">
    return not upload.filename and not upload.size


async def read_uploads(files: Optional[Sequence[UploadFile]], kept_count: int = 0) -> List[bytes]:
    """
    Read uploaded image parts into memory, in upload order.

    Limits are enforced at the upload boundary:
        1. Count: kept_count + number of uploads, before anything is read
        2. Declared size (UploadFile.size), before that part is read
        3. Actual size: at most max_size + 1 bytes are read per part

    Blank parts (no filename, no bytes) are skipped. Every part is closed,
    including when a limit rejects the request.
    """
    uploads = [upload for upload in files or [] if not _is_blank_part(upload)]
    try:
        image_service.validate_count(kept_count + len(uploads))
        for index, upload in enumerate(uploads):
            image_service.validate_reported_size(upload.size, index)

        blobs: List[bytes] = []
        for index, upload in enumerate(uploads):
            content = await upload.read(image_service.max_size + 1)
            image_service.validate_size(content, index)
            if not upload.filename and not content:
                continue
            blobs.append(content)
        return blobs
    finally:
        for upload in files or []:
            await upload.close()
