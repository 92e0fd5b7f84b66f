import json
import logging
from datetime import datetime
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings

from .bus import TERMINAL_EVENT_TYPE

logger = logging.getLogger(__name__)

TERMINAL_ROLES = ("pos", "kitchen", "counter")


class TerminalConsumer(AsyncWebsocketConsumer):
    """
    Shared fanout channel for every connected terminal.

    Any message {"event": name, "payload": {...}} from one terminal is
    rebroadcast verbatim to every other terminal. Nothing is persisted or
    replayed; terminals treat events as hints to refetch.
    """

    async def connect(self):
        query_params = parse_qs(self.scope.get("query_string", b"").decode())
        role = (query_params.get("role") or ["pos"])[0]

        if role not in TERMINAL_ROLES:
            logger.warning(f"TerminalConsumer: rejected unknown role '{role}'")
            await self.close(code=4000)
            return

        self.role = role
        self.group_name = getattr(settings, "REALTIME_GROUP", "terminals")

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        logger.info(f"Terminal connected: role={self.role} channel={self.channel_name}")

        await self.send(
            text_data=json.dumps(
                {
                    "type": "connection_established",
                    "role": self.role,
                    "timestamp": self.get_timestamp(),
                }
            )
        )

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"Terminal disconnected: role={self.role} code={close_code}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Rebroadcast a terminal's event to the others, or answer a ping.
        """
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON received from {self.role} terminal")
            await self.send_error("Message must be a JSON object.")
            return

        if not isinstance(data, dict):
            await self.send_error("Message must be a JSON object.")
            return

        if data.get("type") == "ping":
            await self.send(text_data=json.dumps({"type": "pong", "timestamp": self.get_timestamp()}))
            return

        event = data.get("event")
        if not event or not isinstance(event, str):
            await self.send_error("Message is missing an 'event' name.")
            return

        payload = data.get("payload")
        await self.channel_layer.group_send(
            self.group_name,
            {
                "type": TERMINAL_EVENT_TYPE,
                "event": event,
                "payload": payload if payload is not None else {},
                "sender": self.channel_name,
            },
        )
        logger.debug(f"Rebroadcast {event} from {self.role} terminal")

    # Channel layer event handlers

    async def terminal_event(self, message):
        """
        Forward a fanout event to this terminal, skipping the one that sent it.
        """
        if message.get("sender") == self.channel_name:
            return
        await self.send(
            text_data=json.dumps({"event": message["event"], "payload": message.get("payload", {})})
        )

    async def send_error(self, message):
        await self.send(text_data=json.dumps({"type": "error", "message": message}))

    def get_timestamp(self):
        """
        Get current timestamp in ISO format.
        """
        return datetime.now().isoformat()
