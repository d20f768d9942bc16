"""REST conversation store."""

from conftest import create_trip, open_chat


def send(client, conversation_id, content):
    response = client.post(f"/api/chat/{conversation_id}/messages", json={"content": content})
    assert response.status_code == 201, response.get_json()
    return response.get_json()["sentMessage"]


def test_chat_requires_login(make_client):
    assert make_client().get("/api/chat/conversations").status_code == 401


def test_conversation_is_unique_per_pair(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob

    from_alice = open_chat(alice_client, bob_user["_id"])
    from_bob = open_chat(bob_client, alice_user["_id"])

    assert from_alice["_id"] == from_bob["_id"]
    assert {p["_id"] for p in from_alice["participants"]} == {alice_user["_id"], bob_user["_id"]}
    assert from_alice["messages"] == []
    assert from_alice["relatedPost"] is None


def test_open_conversation_errors(alice):
    client, user = alice
    assert client.get(f"/api/chat/{user['_id']}").status_code == 400
    assert client.get("/api/chat/nobody").status_code == 404


def test_related_post_follows_latest_trip(alice, bob):
    alice_client, _ = alice
    bob_client, bob_user = bob
    post = create_trip(bob_client)

    conversation = open_chat(alice_client, bob_user["_id"], post_id=post["_id"])
    assert conversation["relatedPost"] == {"_id": post["_id"], "title": post["title"]}

    unchanged = open_chat(alice_client, bob_user["_id"])
    assert unchanged["relatedPost"]["_id"] == post["_id"]

    missing = alice_client.get(f"/api/chat/{bob_user['_id']}?postId=missing")
    assert missing.status_code == 404


def test_send_and_read_flow(alice, bob):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    conversation = open_chat(alice_client, bob_user["_id"])

    first = send(alice_client, conversation["_id"], "  Hi Bob, still going to Goa?  ")
    assert first["content"] == "Hi Bob, still going to Goa?"
    assert first["sender"]["_id"] == alice_user["_id"]
    assert first["read"] is False
    send(alice_client, conversation["_id"], "I can share fuel costs")

    bob_list = bob_client.get("/api/chat/conversations").get_json()
    assert len(bob_list) == 1
    assert bob_list[0]["participant"]["_id"] == alice_user["_id"]
    assert bob_list[0]["unreadCount"] == 2
    assert bob_list[0]["lastMessage"]["content"] == "I can share fuel costs"
    assert bob_client.get("/api/chat/unread-count").get_json() == {"unreadCount": 2}

    # the sender's own messages never count as unread for them
    assert alice_client.get("/api/chat/conversations").get_json()[0]["unreadCount"] == 0

    marked = bob_client.put(f"/api/chat/{conversation['_id']}/read")
    assert marked.get_json()["updated"] == 2
    again = bob_client.put(f"/api/chat/{conversation['_id']}/read")
    assert again.get_json()["updated"] == 0

    assert bob_client.get("/api/chat/conversations").get_json()[0]["unreadCount"] == 0
    history = open_chat(bob_client, alice_user["_id"])["messages"]
    assert [m["content"] for m in history] == ["Hi Bob, still going to Goa?", "I can share fuel costs"]
    assert all(m["read"] for m in history)


def test_outsiders_cannot_read_or_post(alice, bob, carol):
    alice_client, _ = alice
    _, bob_user = bob
    carol_client, _ = carol
    conversation = open_chat(alice_client, bob_user["_id"])

    assert carol_client.get(f"/api/chat/{conversation['_id']}/messages").status_code == 403
    assert carol_client.post(
        f"/api/chat/{conversation['_id']}/messages", json={"content": "hello"}
    ).status_code == 403
    assert carol_client.put(f"/api/chat/{conversation['_id']}/read").status_code == 403
    assert alice_client.get("/api/chat/unknown/messages").status_code == 404


def test_message_validation(alice, bob):
    alice_client, _ = alice
    _, bob_user = bob
    conversation = open_chat(alice_client, bob_user["_id"])

    assert alice_client.post(f"/api/chat/{conversation['_id']}/messages", json={"content": "   "}).status_code == 400
    assert alice_client.post(
        f"/api/chat/{conversation['_id']}/messages", json={"content": "x" * 1001}
    ).status_code == 400


def test_conversations_ordered_by_latest_activity(alice, bob, carol):
    alice_client, _ = alice
    _, bob_user = bob
    _, carol_user = carol

    with_bob = open_chat(alice_client, bob_user["_id"])
    with_carol = open_chat(alice_client, carol_user["_id"])
    send(alice_client, with_carol["_id"], "Hi Carol")
    send(alice_client, with_bob["_id"], "Hi Bob")

    ordered = alice_client.get("/api/chat/conversations").get_json()
    assert [c["_id"] for c in ordered] == [with_bob["_id"], with_carol["_id"]]


def test_conversation_summaries_carry_each_latest_message(alice, bob, carol):
    alice_client, alice_user = alice
    bob_client, bob_user = bob
    _, carol_user = carol

    with_bob = open_chat(alice_client, bob_user["_id"])
    with_carol = open_chat(alice_client, carol_user["_id"])
    send(alice_client, with_bob["_id"], "First to Bob")
    send(bob_client, with_bob["_id"], "Reply from Bob")
    send(alice_client, with_bob["_id"], "Latest to Bob")

    summaries = {c["_id"]: c for c in alice_client.get("/api/chat/conversations").get_json()}
    assert summaries[with_bob["_id"]]["lastMessage"]["content"] == "Latest to Bob"
    assert summaries[with_bob["_id"]]["lastMessage"]["sender"] == alice_user["_id"]
    assert summaries[with_bob["_id"]]["participant"]["_id"] == bob_user["_id"]
    assert summaries[with_bob["_id"]]["unreadCount"] == 1
    assert summaries[with_carol["_id"]]["lastMessage"] is None
    assert summaries[with_carol["_id"]]["participant"]["_id"] == carol_user["_id"]
