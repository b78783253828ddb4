import asyncio
import json

import httpx
import pytest

from carpulse.core.errors import APIError, MessageValidationError, StreamingUnsupportedError
from carpulse.schemas import InlineData
from carpulse.services.message_stream import ensure_streamable

RECORDS = b'data: {"content":"a"}\ndata: {"content":"b"}\n'


def split_at(data: bytes, *offsets: int):
    bounds = [0, *offsets, len(data)]
    return [data[start:end] for start, end in zip(bounds, bounds[1:])]


def test_send_message_stream_end_to_end(backend_client, fake_backend):
    async def scenario():
        client = backend_client()
        session = await client.create_session()

        fragments = await client.send_message_stream(session["id"], text="vehicle id: XY-12 please check")

        assert [f["parts"][0]["text"] for f in fragments] == ["vehicle", "id:", "XY-12", "please", "check"]
        assert (await client.get_session(session["id"]))["state"] == {"vehicle_id": "XY-12"}
        assert fake_backend.state.payloads[-1]["newMessage"] == {
            "role": "user",
            "parts": [{"text": "vehicle id: XY-12 please check"}],
        }

    asyncio.run(scenario())


def test_send_message_to_unknown_session_raises(backend_client):
    with pytest.raises(APIError, match="Session not found"):
        asyncio.run(backend_client().send_message_stream("nope", text="hello"))


@pytest.mark.parametrize(
    "offsets",
    [
        (),
        (len(RECORDS) // 2,),
        (5, 17, 30),
        tuple(range(1, len(RECORDS))),
    ],
)
def test_records_split_across_chunk_boundaries(mock_client_factory, sse, offsets):
    client, _ = mock_client_factory(lambda request: sse(split_at(RECORDS, *offsets)))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == ["a", "b"]


def test_multibyte_content_split_mid_character(mock_client_factory, sse):
    body = 'data: {"content":"naïve"}\n'.encode("utf-8")
    cut = body.index("ï".encode("utf-8")) + 1
    client, _ = mock_client_factory(lambda request: sse([body[:cut], body[cut:]]))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == ["naïve"]


def test_malformed_records_are_skipped(mock_client_factory, sse):
    body = b'data: {"content":"a"}\ndata: not-json\n\n: keep-alive\n{"content":"b"}\ndata: {"partial": true}\n'
    client, _ = mock_client_factory(lambda request: sse([body]))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == ["a", "b"]


def test_trailing_partial_line_is_dropped(mock_client_factory, sse):
    body = b'data: {"content":"a"}\ndata: {"content":"b"}'
    client, _ = mock_client_factory(lambda request: sse([body]))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == ["a"]


def test_empty_content_values_are_skipped(mock_client_factory, sse):
    body = (
        b'data: {"content":""}\n'
        b'data: {"content":0}\n'
        b'data: {"content":false}\n'
        b'data: {"content":null}\n'
        b'data: {"content":"a"}\n'
    )
    client, _ = mock_client_factory(lambda request: sse([body]))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == ["a"]


def test_structured_content_passes_through(mock_client_factory, sse):
    content = {"role": "model", "parts": [{"text": "Check the tyre pressure."}]}
    body = f"data: {json.dumps({'content': content})}\r\n".encode("utf-8")
    client, _ = mock_client_factory(lambda request: sse([body]))

    assert asyncio.run(client.send_message_stream("s-1", text="hi")) == [content]


def test_iter_message_stream_yields_incrementally(mock_client_factory, sse):
    client, _ = mock_client_factory(lambda request: sse([RECORDS]))

    async def collect():
        return [fragment async for fragment in client.iter_message_stream("s-1", text="hi")]

    assert asyncio.run(collect()) == ["a", "b"]


def test_payload_and_headers(mock_client_factory, sse):
    client, handler = mock_client_factory(lambda request: sse([]))
    inline = InlineData.from_bytes(b"\x89PNG", "image/png").to_wire()

    asyncio.run(client.send_message_stream("s-1", text="Vehicle ID: ab-9 noise", inline_data=inline))

    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/run_sse"
    assert request.headers["Accept"] == "text/event-stream"
    assert json.loads(request.content) == {
        "appName": "agent",
        "newMessage": {
            "role": "user",
            "parts": [{"text": "Vehicle ID: ab-9 noise"}, {"inlineData": {"mimeType": "image/png", "data": "iVBORw=="}}],
        },
        "sessionId": "s-1",
        "stateDelta": {"vehicle_id": "ab-9"},
        "streaming": False,
        "userId": "user",
    }


def test_inline_data_only_message_has_null_state_delta(mock_client_factory, sse):
    client, handler = mock_client_factory(lambda request: sse([]))

    asyncio.run(client.send_message_stream("s-1", inline_data={"mimeType": "text/plain", "data": "aGk="}))

    payload = json.loads(handler.requests[0].content)
    assert payload["newMessage"]["parts"] == [{"inlineData": {"mimeType": "text/plain", "data": "aGk="}}]
    assert payload["stateDelta"] is None


def test_whitespace_text_is_not_sent_as_part(mock_client_factory, sse):
    client, handler = mock_client_factory(lambda request: sse([]))

    asyncio.run(client.send_message_stream("s-1", text="   ", inline_data={"data": "x"}))

    payload = json.loads(handler.requests[0].content)
    assert payload["newMessage"]["parts"] == [{"inlineData": {"data": "x"}}]


@pytest.mark.parametrize("session_id", ["", None])
def test_missing_session_id_fails_before_request(mock_client_factory, sse, session_id):
    client, handler = mock_client_factory(lambda request: sse([RECORDS]))

    with pytest.raises(MessageValidationError, match="No active session id"):
        asyncio.run(client.send_message_stream(session_id, text="hello"))

    assert handler.requests == []


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_empty_message_fails_before_request(mock_client_factory, sse, text):
    client, handler = mock_client_factory(lambda request: sse([RECORDS]))

    with pytest.raises(MessageValidationError, match="Message empty"):
        asyncio.run(client.send_message_stream("s-1", text=text))

    assert handler.requests == []


def test_http_error_carries_server_text(mock_client_factory):
    client, _ = mock_client_factory(lambda request: httpx.Response(500, text="agent crashed"))

    with pytest.raises(APIError, match="agent crashed"):
        asyncio.run(client.send_message_stream("s-1", text="hello"))


def test_http_error_falls_back_to_status(mock_client_factory):
    client, _ = mock_client_factory(lambda request: httpx.Response(429))

    with pytest.raises(APIError, match="HTTP 429"):
        asyncio.run(client.send_message_stream("s-1", text="hello"))


def test_ensure_streamable_rejects_sync_only_body():
    with pytest.raises(StreamingUnsupportedError):
        ensure_streamable(httpx.Response(200, content=iter([b"data: {}\n"])))

    ensure_streamable(httpx.Response(200, content=b"data: {}\n"))
