import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings

from core.realtime.broadcast import get_broadcaster

logger = logging.getLogger(__name__)

# Ephemeral client events relayed to the other dashboards, never stored.
RELAYED_EVENTS = {'typing', 'stop_typing'}

CLOSE_UNAUTHENTICATED = 4401


class ClinicEventsConsumer(AsyncWebsocketConsumer):
    """One socket per dashboard; every client receives every event."""

    group_name = None

    def identity(self) -> dict:
        user = self.scope['user']
        return {'id': user.id, 'username': user.username, 'name': getattr(user, 'name', ''), 'role': user.role}

    async def connect(self):
        user = self.scope.get('user')
        if not (user and user.is_authenticated):
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return
        self.group_name = settings.REALTIME_GROUP
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.debug("socket connected: %s (%s)", user.username, self.channel_name)
        await get_broadcaster().apublish('client_connected', self.identity())

    async def disconnect(self, close_code):
        if self.group_name is None:
            return
        await self.channel_layer.group_discard(self.group_name, self.channel_name)
        logger.debug("socket disconnected: %s (%s)", self.channel_name, close_code)
        await get_broadcaster().apublish('client_disconnected', self.identity())

    async def receive(self, text_data=None, bytes_data=None):
        try:
            message = json.loads(text_data or '')
        except ValueError:
            await self.send_error('Malformed message.')
            return
        event = message.get('event') if isinstance(message, dict) else None
        if event not in RELAYED_EVENTS:
            await self.send_error('Unsupported event.')
            return
        data = message.get('data')
        payload = dict(data) if isinstance(data, dict) else {}
        payload['from'] = self.identity()
        await get_broadcaster().apublish(event, payload, sender=self.channel_name)

    async def send_error(self, message: str):
        await self.send(json.dumps({'event': 'error', 'data': {'message': message}}))

    async def clinic_event(self, message):
        # Relayed client events are not echoed back to their sender.
        if message.get('sender') == self.channel_name:
            return
        await self.send(json.dumps({'event': message['event'], 'data': message['data']}))
