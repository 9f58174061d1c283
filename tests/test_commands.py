from slackbot import Message


def test_command_without_reply_is_empty_ok(bot, client):
    bot.register_command("test", lambda bot, command: None)
    resp = client.post("/slack/commands/test", data={"command": "/test"})
    assert resp.status_code == 200
    assert resp.content == b""


def test_command_reply_becomes_json_body(bot, client):
    bot.register_command("test", lambda bot, command: Message(text="hello world!"))
    resp = client.post("/slack/commands/test", data={"command": "/test"})
    assert resp.status_code == 200
    assert resp.json() == {"text": "hello world!"}


def test_string_reply_is_wrapped_as_message(bot, client):
    bot.register_command("echo", lambda bot, command: command.text)
    resp = client.post("/slack/commands/echo", data={"command": "/echo", "text": "ping"})
    assert resp.json() == {"text": "ping"}


def test_command_handler_receives_decoded_fields(bot, client):
    seen = []
    bot.register_command("who", lambda bot, command: seen.append((bot, command)))
    client.post(
        "/slack/commands/who",
        data={"command": "/who", "user_id": "U1", "channel_id": "C1", "text": "me"},
    )
    (got_bot, command), = seen
    assert got_bot is bot
    assert (command.user_id, command.channel_id, command.text) == ("U1", "C1", "me")


def test_missing_command_field_is_bad_request(bot, client):
    bot.register_command("test", lambda bot, command: None)
    resp = client.post("/slack/commands/test")
    assert resp.status_code == 400
    assert resp.content == b""


def test_latest_registration_wins(bot, client):
    calls = []
    bot.register_command("test", lambda bot, command: calls.append("first"))
    bot.register_command("test", lambda bot, command: calls.append("second"))
    client.post("/slack/commands/test", data={"command": "/test"})
    assert calls == ["second"]


def test_unregistered_command_is_not_found(client):
    resp = client.post("/slack/commands/nope", data={"command": "/nope"})
    assert resp.status_code == 404


def test_command_registered_after_app_creation_is_served(bot, client):
    bot.register_command("late", lambda bot, command: "here")
    resp = client.post("/slack/commands/late", data={"command": "/late"})
    assert resp.json() == {"text": "here"}


def test_handler_error_is_server_error(bot, lenient_client):
    def broken(bot, command):
        raise RuntimeError("boom")

    bot.register_command("broken", broken)
    resp = lenient_client.post("/slack/commands/broken", data={"command": "/broken"})
    assert resp.status_code == 500
