from django.urls import re_path

from core.realtime.consumers import ClinicEventsConsumer

websocket_urlpatterns = [
    re_path(r'^ws/events/?$', ClinicEventsConsumer.as_asgi()),
]
