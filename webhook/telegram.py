"""
Telegram Webhook Handler

Receives Telegram updates via webhook and relays them as voice replies.

Update Flow:
  webhook → parse_update → (background) relay handler → sendVoice | sendMessage

Telegram always gets {"status": "ok"} for a parsed update so it does not
redeliver; malformed JSON is rejected by FastAPI with 422.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from fastapi import APIRouter, BackgroundTasks, HTTPException

from config import Config
from relay.handler import RelayHandler

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/webhook", tags=["webhook"])


# Telegram update structure (only the fields the relay reads)
class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: Optional[str] = None  # private, group, supergroup, channel


class TelegramUser(BaseModel):
    id: int
    first_name: Optional[str] = None
    username: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    chat: TelegramChat
    text: Optional[str] = None
    message_id: Optional[int] = None
    from_: Optional[TelegramUser] = Field(default=None, alias="from")


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None


# Installed by the application lifespan once the first credential is in hand
_relay_handler: Optional[RelayHandler] = None


def get_relay_handler() -> Optional[RelayHandler]:
    """Get the installed relay handler (None before startup completes)."""
    return _relay_handler


def set_relay_handler(handler: Optional[RelayHandler]) -> None:
    """Install or clear the relay handler."""
    global _relay_handler
    _relay_handler = handler


@router.post("")
async def telegram_webhook(update: TelegramUpdate, background_tasks: BackgroundTasks):
    """
    Receive Telegram webhook updates.

    Expected payload:
    {
        "message": {
            "text": "hello",
            "chat": {"id": 123456789}
        }
    }

    Returns:
        {"status": "ok"}; the reply is sent from a background task
    """
    try:
        if not update.message:
            logger.warning(f"Update {update.update_id} has no message")
            return {"status": "ok"}

        msg = update.message
        if not msg.text:
            logger.debug(f"Message in chat {msg.chat.id} has no text, skipping")
            return {"status": "ok"}

        logger.info(f"Received message in chat {msg.chat.id}: {msg.text[:50]}")

        handler = get_relay_handler()
        if handler is None:
            logger.error("Relay handler not initialized, dropping message")
            return {"status": "ok"}

        background_tasks.add_task(_relay_async, handler, msg.chat.id, msg.text)
        return {"status": "ok"}

    except Exception as e:
        logger.error(f"Error processing Telegram update: {str(e)}", exc_info=True)
        # Still return 200 to Telegram to acknowledge receipt
        return {"status": "ok"}


async def _relay_async(handler: RelayHandler, chat_id: int, text: str):
    """Background task: run the relay and log anything unexpected."""
    try:
        outcome = await handler.handle(chat_id, text)
        logger.info(f"Relay for chat {chat_id} finished in state {outcome.state.value}")
    except Exception as e:
        logger.error(f"Error in relay task for chat {chat_id}: {str(e)}", exc_info=True)


@router.get("/health")
async def telegram_health():
    """Health check for the Telegram webhook."""
    handler = get_relay_handler()
    if handler is None:
        raise HTTPException(status_code=503, detail="relay handler not initialized")
    return {
        "status": "ok",
        "bot_token_loaded": bool(Config.BOT_TOKEN),
        "reply_mode": handler.reply_mode.value,
        "token_loaded": bool(handler.credentials.token),
        "token_generation": handler.credentials.generation,
    }
