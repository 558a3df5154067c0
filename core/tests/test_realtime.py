"""
WebSocket broadcast tests.

These run the consumer against the in-memory channel layer; tokens are
signed for unsaved users since socket authentication never reads the
database.
"""
import pytest
from asgiref.sync import sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from core.models import User
from core.realtime.broadcast import broadcast, get_broadcaster
from core.realtime.middleware import TokenAuthMiddleware
from core.realtime.routing import websocket_urlpatterns
from core.services.sessions import issue_token


def application():
    return TokenAuthMiddleware(URLRouter(websocket_urlpatterns))


def token_for(uid, username, role):
    token, _ = issue_token(User(id=uid, username=username, name=username.title(), role=role))
    return token


@pytest.fixture(autouse=True)
async def empty_layer():
    yield
    await get_channel_layer().flush()


async def connect(uid, username, role):
    communicator = WebsocketCommunicator(application(), f"/ws/events/?token={token_for(uid, username, role)}")
    connected, _ = await communicator.connect()
    assert connected
    return communicator


async def test_connections_are_announced():
    first = await connect(2, 'dr_sara', 'doctor')
    assert await first.receive_json_from() == {
        'event': 'client_connected',
        'data': {'id': 2, 'username': 'dr_sara', 'name': 'Dr_Sara', 'role': 'doctor'},
    }

    second = await connect(3, 'lab_omar', 'lab')
    joined = await first.receive_json_from()
    assert joined['event'] == 'client_connected'
    assert joined['data']['username'] == 'lab_omar'

    await second.disconnect()
    left = await first.receive_json_from()
    assert left == {
        'event': 'client_disconnected',
        'data': {'id': 3, 'username': 'lab_omar', 'name': 'Lab_Omar', 'role': 'lab'},
    }
    await first.disconnect()


@pytest.mark.parametrize('path', ['/ws/events/', '/ws/events/?token=garbage'])
async def test_sockets_without_a_valid_token_are_refused(path):
    communicator = WebsocketCommunicator(application(), path)

    connected, code = await communicator.connect()

    assert not connected
    assert code == 4401


async def test_server_events_reach_every_client():
    first = await connect(2, 'dr_sara', 'doctor')
    second = await connect(3, 'lab_omar', 'lab')
    await first.receive_json_from()
    await first.receive_json_from()
    await second.receive_json_from()

    await get_broadcaster().apublish('patient_added', {'id': 5, 'name': 'Amal'})
    await sync_to_async(broadcast)('lab_test_updated', {'id': 9, 'status': 'completed'})

    for communicator in (first, second):
        assert await communicator.receive_json_from() == {'event': 'patient_added', 'data': {'id': 5, 'name': 'Amal'}}
        assert await communicator.receive_json_from() == {
            'event': 'lab_test_updated', 'data': {'id': 9, 'status': 'completed'},
        }
        await communicator.disconnect()


async def test_typing_is_relayed_to_the_others_only():
    first = await connect(2, 'dr_sara', 'doctor')
    second = await connect(4, 'nurse_huda', 'nurse')
    await first.receive_json_from()
    await first.receive_json_from()
    await second.receive_json_from()

    await second.send_json_to({'event': 'typing', 'data': {'patient_id': 12}})

    assert await first.receive_json_from() == {
        'event': 'typing',
        'data': {
            'patient_id': 12,
            'from': {'id': 4, 'username': 'nurse_huda', 'name': 'Nurse_Huda', 'role': 'nurse'},
        },
    }
    assert await second.receive_nothing()
    await first.disconnect()
    await second.disconnect()


async def test_bad_client_messages_get_an_error_frame():
    client = await connect(2, 'dr_sara', 'doctor')
    await client.receive_json_from()

    await client.send_to(text_data='not json')
    assert await client.receive_json_from() == {'event': 'error', 'data': {'message': 'Malformed message.'}}

    await client.send_json_to({'event': 'patient_deleted', 'data': {'id': 1}})
    assert await client.receive_json_from() == {'event': 'error', 'data': {'message': 'Unsupported event.'}}
    await client.disconnect()
