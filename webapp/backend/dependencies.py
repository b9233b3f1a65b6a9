"""FastAPI dependencies: Telegram initData auth and per-user storage."""

import hashlib
import hmac
import json
import logging
from typing import Optional
from urllib.parse import parse_qs

from fastapi import Depends, Header, HTTPException, status

from mathbot.config import settings
from mathbot.database import SqlKeyValueStorage, async_session
from mathbot.services.history import HistoryStore
from mathbot.services.preferences import PreferenceService
from mathbot.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)


def validate_init_data(init_data: str, bot_token: str) -> Optional[int]:
    """
    Validate Telegram Mini App initData.

    Returns telegram_id if valid, None otherwise.

    See: https://core.telegram.org/bots/webapps#validating-data-received-via-the-mini-app
    """
    parsed = parse_qs(init_data, keep_blank_values=True)

    received_hash = parsed.get("hash", [None])[0]
    if not received_hash:
        return None

    # data-check-string: sorted key=value pairs without the hash
    data_check_string = "\n".join(
        f"{key}={values[0]}" for key, values in sorted(parsed.items()) if key != "hash"
    )

    secret_key = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    calculated_hash = hmac.new(
        secret_key,
        data_check_string.encode(),
        hashlib.sha256,
    ).hexdigest()

    if not hmac.compare_digest(calculated_hash, received_hash):
        return None

    user_data_str = parsed.get("user", [None])[0]
    if not user_data_str:
        return None

    try:
        user_id = json.loads(user_data_str).get("id")
    except (ValueError, AttributeError) as e:
        logger.warning(f"initData user payload is invalid: {e}")
        return None

    return user_id if isinstance(user_id, int) else None


async def get_telegram_user(
    x_telegram_init_data: str = Header(..., alias="X-Telegram-Init-Data"),
) -> int:
    """Dependency to validate Telegram initData and return user ID."""
    telegram_id = validate_init_data(x_telegram_init_data, settings.telegram_bot_token)

    if telegram_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Telegram authentication",
        )

    return telegram_id


async def get_storage(telegram_id: int = Depends(get_telegram_user)) -> KeyValueStorage:
    """Key/value storage of the authenticated user (private chat id == user id)."""
    return SqlKeyValueStorage(async_session, telegram_id)


async def get_history(storage: KeyValueStorage = Depends(get_storage)) -> HistoryStore:
    return await HistoryStore.load(storage, limit=settings.history_limit)


async def get_preferences(storage: KeyValueStorage = Depends(get_storage)) -> PreferenceService:
    return PreferenceService(storage)
