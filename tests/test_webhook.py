import base64
import hashlib
import hmac
import json

import pytest

import config
import main
import main_initializer
from handlers import text_router

from tests.fakes import FakeLLM, make_services


def _sign(body: str) -> str:
    digest = hmac.new(config.LINE_CHANNEL_SECRET.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def _text_event(text, source=None, mention=None, reply_token="rt-1"):
    message = {"id": "100001", "type": "text", "text": text, "quoteToken": "q-token"}
    if mention:
        message["mention"] = mention
    return {
        "type": "message",
        "mode": "active",
        "timestamp": 1714528800000,
        "source": source or {"type": "user", "userId": "U1"},
        "webhookEventId": "01HWEBHOOKEVENT0000000000",
        "deliveryContext": {"isRedelivery": False},
        "replyToken": reply_token,
        "message": message,
    }


def _body(*events):
    return json.dumps({"destination": "Ubot0000", "events": list(events)}, ensure_ascii=False)


@pytest.fixture
def sent(monkeypatch):
    replies = []
    monkeypatch.setattr(main_initializer, "_services", make_services(FakeLLM(chat_reply="哈囉")))
    monkeypatch.setattr(
        text_router, "send_line_reply_message",
        lambda api, reply_token, messages, user_id=None: replies.append((reply_token, messages, user_id)) or True,
    )
    return replies


@pytest.fixture
def client():
    main.app.config["TESTING"] = True
    return main.app.test_client()


def test_health(client):
    assert client.get("/health").data == b"OK"


def test_invalid_signature_is_rejected(client, sent):
    response = client.post("/callback", data=_body(_text_event("抽籤")), headers={"X-Line-Signature": "bad"})
    assert response.status_code == 400
    assert sent == []


def test_direct_text_message_gets_one_reply(client, sent):
    body = _body(_text_event("我要抽籤"))
    response = client.post("/callback", data=body, headers={"X-Line-Signature": _sign(body)})

    assert response.status_code == 200
    assert response.data == b"OK"
    assert len(sent) == 1
    reply_token, messages, push_target = sent[0]
    assert reply_token == "rt-1"
    assert len(messages) == 1
    assert push_target == "U1"


def test_group_message_without_mention_is_silent(client, sent):
    source = {"type": "group", "groupId": "G1", "userId": "U1"}
    body = _body(_text_event("今天天氣如何", source=source))
    response = client.post("/callback", data=body, headers={"X-Line-Signature": _sign(body)})

    assert response.status_code == 200
    assert sent == []
    assert main_initializer.get_services().llm.calls == []


def test_group_message_mentioning_bot_falls_back_to_sender(client, sent):
    source = {"type": "group", "groupId": "G1", "userId": "U1"}
    mention = {"mentionees": [{"index": 0, "length": 6, "type": "user", "userId": "Ubot0000", "isSelf": True}]}
    body = _body(_text_event("@Kevin 抽籤", source=source, mention=mention))
    client.post("/callback", data=body, headers={"X-Line-Signature": _sign(body)})

    assert len(sent) == 1
    assert sent[0][2] == "U1"


def test_events_in_one_delivery_are_processed_in_order(client, sent):
    body = _body(_text_event("我要抽籤", reply_token="rt-1"), _text_event("講個笑話", reply_token="rt-2"))
    client.post("/callback", data=body, headers={"X-Line-Signature": _sign(body)})
    assert [reply_token for reply_token, _, _ in sent] == ["rt-1", "rt-2"]
    assert sent[1][1][0].text == "哈囉"


def test_handler_failure_still_acknowledges(client, sent, monkeypatch):
    def boom():
        raise RuntimeError("broken")

    monkeypatch.setattr(text_router, "get_services", boom)
    body = _body(_text_event("我要抽籤"))
    response = client.post("/callback", data=body, headers={"X-Line-Signature": _sign(body)})
    assert response.status_code == 200
    assert response.data == b"OK"


def test_update_stocks_requires_bearer_secret(client):
    assert client.get("/update_stocks").status_code == 401
    response = client.get("/update_stocks", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "unauthorized"}


def test_update_stocks_runs_maintenance(client, sent, monkeypatch):
    monkeypatch.setattr(main, "run_maintenance", lambda services: {"ok": True, "count": 3})
    response = client.get("/update_stocks", headers={"Authorization": f"Bearer {config.CRON_SECRET}"})
    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "count": 3}
