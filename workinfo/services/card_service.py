"""
Card use cases: lookups, create/update, profile image upload, vCard export
and field validation.
"""

from __future__ import annotations

import hashlib
import io
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from workinfo.core.config import get_settings
from workinfo.db.models import Card, User
from workinfo.domain.contact import (
    is_valid_email,
    is_valid_phone,
    is_valid_url,
    normalize_external_url,
    normalize_hex_color,
)
from workinfo.domain.usernames import normalize_username
from workinfo.repositories.sql_repository import CARD_FIELDS, SQLRepository
from workinfo.services.tracking_script import validate_tracking_script

logger = logging.getLogger(__name__)

JPEG_MAGIC = b"\xFF\xD8\xFF"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
PROFILE_IMAGE_SIZE = (640, 640)

# Fields the card form may send; the image only changes through upload.
EDITABLE_FIELDS = tuple(name for name in CARD_FIELDS if name != "profile_image")
REQUIRED_FIELDS = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "company": "Company is required",
}


class CardError(Exception):
    """Base exception for card workflows."""


class NotAuthenticatedError(CardError):
    """Raised when a card operation runs without a signed-in user."""


class CardValidationError(CardError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class InvalidImageError(CardError):
    """Raised for uploads that are not a JPEG/PNG within the size limit."""


@dataclass
class CardValidation:
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _field(card: Any, name: str) -> Any:
    if card is None:
        return None
    if isinstance(card, Mapping):
        return card.get(name)
    return getattr(card, name, None)


def card_to_dict(card: Card) -> dict:
    data = {name: getattr(card, name) for name in CARD_FIELDS}
    data.update(
        {
            "id": card.id,
            "user_id": card.user_id,
            "username": card.username,
            "is_active": bool(card.is_active),
            "profile_image_url": profile_image_url(card),
        }
    )
    return data


def share_url(username: str) -> str:
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/users/{username}"


def profile_image_url(card: Any) -> str:
    """Absolute URL of the stored profile image, or "" when there is none."""
    filename = _field(card, "profile_image")
    card_id = _field(card, "id")
    if not filename or not card_id:
        return ""
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/static/uploads/cards/{card_id}/{filename}"


def _vcard_escape(value: str) -> str:
    return (
        str(value)
        .replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def generate_vcard(card: Any) -> str:
    """vCard 3.0 text for a card; empty optional fields are left out."""
    first = _vcard_escape(_field(card, "first_name") or "")
    last = _vcard_escape(_field(card, "last_name") or "")
    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"FN:{first} {last}".rstrip(),
        f"N:{last};{first};;;",
    ]
    optional = (
        ("company", "ORG"),
        ("title", "TITLE"),
        ("email", "EMAIL"),
        ("mobile", "TEL;TYPE=CELL"),
        ("office", "TEL;TYPE=WORK"),
        ("website", "URL"),
        ("note", "NOTE"),
    )
    for name, prop in optional:
        value = _field(card, name)
        if value:
            lines.append(f"{prop}:{_vcard_escape(value)}")
    lines.append("END:VCARD")
    return "\r\n".join(lines)


def _text(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    return "" if value is None else str(value).strip()


def validate_card(data: Mapping[str, Any]) -> CardValidation:
    errors: dict[str, str] = {}
    for name, message in REQUIRED_FIELDS.items():
        if not _text(data, name):
            errors[name] = message
    email = _text(data, "email")
    if email and not is_valid_email(email):
        errors["email"] = "Invalid email format"
    for name in ("mobile", "office"):
        value = _text(data, name)
        if value and not is_valid_phone(value):
            errors[name] = "Invalid phone format"
    website = _text(data, "website")
    if website and not is_valid_url(website):
        errors["website"] = "Invalid URL format"
    for name in ("theme_primary_light", "theme_primary_dark"):
        value = _text(data, name)
        if value and normalize_hex_color(value) is None:
            errors[name] = "Invalid color"
    tracking = validate_tracking_script(_text(data, "tracking_script"))
    if not tracking.valid:
        errors["tracking_script"] = tracking.error or "Invalid tracking script"
    return CardValidation(is_valid=not errors, errors=errors)


class CardService:
    """Business card CRUD bound to the signed-in user."""

    def __init__(self) -> None:
        self.repository = SQLRepository()

    @property
    def settings(self):
        return get_settings()

    # -------------------------- lookups --------------------------
    def get_user_card(self, user_id: str | None) -> Optional[Card]:
        if not user_id:
            return None
        return self.repository.get_active_card_for_user(user_id)

    def get_card_by_username(self, username: str | None) -> Optional[Card]:
        user = self.repository.get_user_by_username(normalize_username(username))
        if not user:
            return None
        return self.repository.get_active_card_for_user(user.id)

    # -------------------------- mutations --------------------------
    def _clean_payload(self, data: Mapping[str, Any]) -> dict:
        payload: dict[str, Any] = {}
        for name in EDITABLE_FIELDS:
            if name not in data:
                continue
            value = data.get(name)
            value = "" if value is None else str(value).strip()
            if name in ("theme_primary_light", "theme_primary_dark") and value:
                value = normalize_hex_color(value) or value
            elif name == "website" and value:
                value = normalize_external_url(value)
            payload[name] = value
        return payload

    def save_card(self, user: User | None, data: Mapping[str, Any]) -> Card:
        """Create the user's card or update the existing one."""
        if user is None:
            raise NotAuthenticatedError("User not authenticated")
        payload = self._clean_payload(data or {})
        existing = self.get_user_card(user.id)
        merged = card_to_dict(existing) if existing else {}
        merged.update(payload)
        validation = validate_card(merged)
        if not validation.is_valid:
            raise CardValidationError(validation.errors)
        if existing:
            card = self.repository.update_card(existing.id, payload)
            logger.info("Updated card %s for %s", existing.id, user.username)
            return card
        card = self.repository.create_card(user.id, user.username, payload)
        logger.info("Created card %s for %s", card.id, user.username)
        return card

    def delete_card(self, user: User | None) -> bool:
        if user is None:
            return False
        card = self.get_user_card(user.id)
        if not card:
            return False
        self.repository.delete_card(card.id)
        logger.info("Deleted card %s for %s", card.id, user.username)
        return True

    # -------------------------- images --------------------------
    def _has_valid_signature(self, data: bytes, content_type: str) -> bool:
        if content_type in {"image/jpeg", "image/jpg", "image/pjpeg"}:
            return data.startswith(JPEG_MAGIC)
        if content_type == "image/png":
            return data.startswith(PNG_MAGIC)
        return False

    def _resize(self, data: bytes) -> bytes:
        try:
            image = Image.open(io.BytesIO(data))
            image = ImageOps.exif_transpose(image)
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidImageError("Invalid image file.") from exc
        image = image.convert("RGB")
        image.thumbnail(PROFILE_IMAGE_SIZE, Image.LANCZOS)
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=85, optimize=True)
        return buffer.getvalue()

    def upload_profile_image(self, user: User | None, data: bytes, content_type: str) -> str:
        """Store a resized profile image and return its public URL."""
        if user is None:
            raise NotAuthenticatedError("User not authenticated")
        if not data:
            raise InvalidImageError("Empty upload.")
        if len(data) > self.settings.max_upload_bytes:
            raise InvalidImageError("Image is too large.")
        if not self._has_valid_signature(data, (content_type or "").lower()):
            raise InvalidImageError("Only JPEG or PNG images are accepted.")
        payload = self._resize(data)

        card = self.get_user_card(user.id)
        if not card:
            card = self.repository.create_card(user.id, user.username, {"first_name": "", "last_name": "", "company": ""})

        filename = f"profile-{hashlib.md5(payload).hexdigest()[:8]}.jpg"
        dest_dir = os.path.join(self.settings.uploads_dir, "cards", card.id)
        os.makedirs(dest_dir, exist_ok=True)
        with open(os.path.join(dest_dir, filename), "wb") as handle:
            handle.write(payload)
        card = self.repository.update_card(card.id, {"profile_image": filename})
        return profile_image_url(card)

    # -------------------------- urls --------------------------
    def get_card_share_url(self, username: str) -> str:
        return share_url(username)

    def get_profile_image_url(self, card: Any) -> str:
        return profile_image_url(card)

    def generate_vcard(self, card: Any) -> str:
        return generate_vcard(card)

    def validate_card(self, data: Mapping[str, Any]) -> CardValidation:
        return validate_card(data)
