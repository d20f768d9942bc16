"""Socket.IO connection, presence and message relay."""

import pytest

from conftest import open_chat


def events(socket_client, name):
    return [e["args"][0] for e in socket_client.get_received() if e["name"] == name]


@pytest.fixture
def connect(socketio, app):
    clients = []

    def _connect(http_client=None):
        sc = socketio.test_client(app, flask_test_client=http_client)
        clients.append(sc)
        return sc

    yield _connect
    for sc in clients:
        if sc.is_connected():
            sc.disconnect()


def test_unauthenticated_socket_is_refused(connect):
    assert not connect().is_connected()


def test_connect_and_join(connect, alice):
    client, user = alice
    sc = connect(client)
    assert sc.is_connected()
    assert events(sc, "connected")[0]["userId"] == user["_id"]

    sc.emit("join", user["_id"])
    joined = events(sc, "joined")
    assert joined == [{"userId": user["_id"], "onlineUsers": [user["_id"]]}]


def test_join_as_someone_else_is_rejected(connect, app, alice, bob):
    client, _ = alice
    _, bob_user = bob
    sc = connect(client)
    sc.get_received()

    sc.emit("join", bob_user["_id"])
    errors = events(sc, "error")
    assert errors and errors[0]["event"] == "join"
    assert app.extensions["presence"].online_users() == []


def test_send_message_reaches_receiver_only(connect, alice, bob, carol):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    carol_client, carol_user = carol
    conversation = open_chat(alice_client, bob_user["_id"])

    sc_alice, sc_bob, sc_carol = connect(alice_client), connect(bob_client), connect(carol_client)
    sc_alice.emit("join", alice_user["_id"])
    sc_bob.emit("join", bob_user["_id"])
    sc_carol.emit("join", carol_user["_id"])
    for sc in (sc_alice, sc_bob, sc_carol):
        sc.get_received()

    ack = sc_alice.emit(
        "sendMessage",
        {"receiverId": bob_user["_id"], "message": " See you at 7! ", "senderId": alice_user["_id"]},
        callback=True,
    )
    assert ack["status"] == "ok"
    assert ack["delivered"] is True
    assert ack["conversationId"] == conversation["_id"]

    received = events(sc_bob, "receiveMessage")
    assert len(received) == 1
    assert received[0]["senderId"] == alice_user["_id"]
    assert received[0]["receiverId"] == bob_user["_id"]
    assert received[0]["message"] == "See you at 7!"
    assert received[0]["conversationId"] == conversation["_id"]
    assert received[0]["timestamp"].endswith("Z")

    assert events(sc_carol, "receiveMessage") == []
    assert events(sc_alice, "receiveMessage") == []


def test_send_to_offline_user_is_not_delivered(connect, alice, bob):
    alice_client, alice_user = alice
    _, bob_user = bob
    sc = connect(alice_client)
    sc.emit("join", alice_user["_id"])

    ack = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "ping"}, callback=True)
    assert ack == {"status": "ok", "delivered": False, "conversationId": None, "timestamp": ack["timestamp"]}


def test_send_message_rejections(connect, alice, bob, carol):
    alice_client, alice_user = alice
    _, bob_user = bob
    _, carol_user = carol
    sc = connect(alice_client)

    before_join = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "hi"}, callback=True)
    assert before_join == {"status": "error", "message": "Join before sending messages"}

    sc.emit("join", alice_user["_id"])
    spoofed = sc.emit(
        "sendMessage",
        {"receiverId": bob_user["_id"], "message": "hi", "senderId": carol_user["_id"]},
        callback=True,
    )
    assert spoofed["message"] == "senderId does not match the authenticated user"

    to_self = sc.emit("sendMessage", {"receiverId": alice_user["_id"], "message": "hi"}, callback=True)
    assert to_self["message"] == "Cannot send a message to yourself"

    unknown = sc.emit("sendMessage", {"receiverId": "ghost", "message": "hi"}, callback=True)
    assert unknown["message"] == "Receiver not found"

    blank = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "   "}, callback=True)
    assert blank["status"] == "error"
    assert "message" in blank["details"]

    foreign = open_chat(alice_client, carol_user["_id"])
    wrong_thread = sc.emit(
        "sendMessage",
        {"receiverId": bob_user["_id"], "message": "hi", "conversationId": foreign["_id"]},
        callback=True,
    )
    assert wrong_thread["message"] == "Conversation does not belong to these users"


def test_presence_online_offline_broadcasts(connect, app, alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    presence = app.extensions["presence"]

    sc_alice = connect(alice_client)
    sc_alice.emit("join", alice_user["_id"])
    sc_alice.get_received()

    sc_bob_tab1 = connect(bob_client)
    sc_bob_tab1.emit("join", bob_user["_id"])
    assert events(sc_alice, "userOnline") == [{"userId": bob_user["_id"]}]

    sc_bob_tab2 = connect(bob_client)
    sc_bob_tab2.emit("join", bob_user["_id"])
    assert events(sc_alice, "userOnline") == []
    assert len(presence.sids_for_user(bob_user["_id"])) == 2

    sc_bob_tab1.disconnect()
    assert events(sc_alice, "userOffline") == []
    assert presence.is_online(bob_user["_id"])

    sc_bob_tab2.disconnect()
    assert events(sc_alice, "userOffline") == [{"userId": bob_user["_id"]}]
    assert not presence.is_online(bob_user["_id"])

    sc_alice.emit("getOnlineUsers")
    assert events(sc_alice, "onlineUsers") == [{"users": [alice_user["_id"]]}]


def test_ping(connect, alice):
    sc = connect(alice[0])
    sc.get_received()
    sc.emit("ping")
    assert "timestamp" in events(sc, "pong")[0]


def test_message_length_follows_websocket_config(connect, app, alice, bob):
    alice_client, alice_user = alice
    _, bob_user = bob
    sc = connect(alice_client)
    sc.emit("join", alice_user["_id"])

    too_long = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "x" * 1001}, callback=True)
    assert too_long == {"status": "error", "message": "Message exceeds 1000 characters"}

    app.config["WEBSOCKET"]["max_message_length"] = 2000
    raised = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "x" * 1500}, callback=True)
    assert raised["status"] == "ok"

    over_raised = sc.emit("sendMessage", {"receiverId": bob_user["_id"], "message": "x" * 2001}, callback=True)
    assert over_raised["message"] == "Message exceeds 2000 characters"
