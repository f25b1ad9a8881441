"""Read-only lookups behind the public card page (``/users/{username}``)."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from workinfo.domain.usernames import normalize_username
from workinfo.repositories.sql_repository import SQLRepository
from workinfo.services.card_service import card_to_dict, profile_image_url, share_url

logger = logging.getLogger(__name__)


class PublicCardService:
    def __init__(self) -> None:
        self.repository = SQLRepository()

    def fetch_public_card(self, username: str | None) -> Optional[dict]:
        """Active card for ``username`` (case-insensitive) with its owner under ``expand``."""
        normalized = normalize_username(username)
        if not normalized:
            return None
        card = self.repository.get_active_card_by_username(normalized)
        if not card:
            logger.info("No active card found for username %s", normalized)
            return None
        data = card_to_dict(card)
        owner = self.repository.get_user(card.user_id)
        if owner:
            owner_data = {"id": owner.id, "username": owner.username}
        else:
            owner_data = {"id": card.user_id, "username": card.username}
        data["expand"] = {"user_id": owner_data}
        return data

    def get_public_image_url(self, card: Any) -> str:
        return profile_image_url(card)

    def get_public_share_url(self, username: str) -> str:
        return share_url(username)

    def is_valid_public_card(self, card: Mapping[str, Any] | None) -> bool:
        if not card:
            return False
        return bool(card.get("first_name") and card.get("last_name") and card.get("is_active") and card.get("username"))
