"""
Webhook module - FastAPI route handlers for the Telegram relay.
"""

from webhook.telegram import router, get_relay_handler, set_relay_handler

__all__ = ["router", "get_relay_handler", "set_relay_handler"]
