"""Per-chat session controllers, built lazily from persisted state."""

import logging
from typing import Callable, Dict

from mathbot.services.history import HistoryStore
from mathbot.services.preferences import PreferenceService
from mathbot.services.session import SessionController
from mathbot.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Holds one SessionController per chat.

    All access happens on the bot's event loop, so every controller is the
    single owner of its chat's session state. The persisted history is
    shared with the Mini App and is re-read on every access.
    """

    def __init__(self, client, storage_factory: Callable[[int], KeyValueStorage]):
        self.client = client
        self.storage_factory = storage_factory
        self._controllers: Dict[int, SessionController] = {}

    def storage(self, chat_id: int) -> KeyValueStorage:
        return self.storage_factory(chat_id)

    def preferences(self, chat_id: int) -> PreferenceService:
        return PreferenceService(self.storage(chat_id))

    async def get(self, chat_id: int) -> SessionController:
        """
        Get the chat's controller with its history freshly read from storage.

        Raises:
            StorageError: the history could not be read; nothing is cached
        """
        controller = self._controllers.get(chat_id)
        if controller is not None:
            await controller.history.refresh()
            return controller

        history = await HistoryStore.load(self.storage(chat_id))
        controller = SessionController(self.client, history)
        self._controllers[chat_id] = controller
        logger.debug(f"Loaded session for chat {chat_id} ({len(history)} history records)")
        return controller

    async def reset(self, chat_id: int) -> None:
        """Forget the chat's session and every persisted key."""
        controller = self._controllers.pop(chat_id, None)
        if controller is not None:
            controller.reset()
        await self.preferences(chat_id).reset()
