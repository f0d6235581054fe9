"""Remote responder tests against a local aiohttp server."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from carevoice.models.language import SupportedLanguage
from carevoice.models.responses import AnswerSource, FailureKind, QueryRequest
from carevoice.responder.errors import ResponderPayloadError, ResponderUnavailableError
from carevoice.responder.remote import RemoteQueryResponder
from carevoice.responder.resilient import ResilientResponder

VALID_ANSWER = {
    "answer_text": "Your sugar is a little high.",
    "disclaimer": "Consult your doctor.",
    "actions": [{"id": "reminder", "label": "Add Reminder", "type": "reminder"}],
}


class VoiceBackend:
    """Scripted backend; each test sets how the endpoint replies."""

    def __init__(self):
        self.received = []
        self.status = 200
        self.body = VALID_ANSWER
        self.raw_body = None
        self.raw_bytes = None
        self.delay = 0.0

    async def handle(self, request):
        self.received.append(await request.json())
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raw_bytes is not None:
            return web.Response(status=self.status, body=self.raw_bytes, content_type="application/json")
        if self.raw_body is not None:
            return web.Response(status=self.status, text=self.raw_body, content_type="application/json")
        return web.json_response(self.body, status=self.status)


@pytest.fixture
def backend():
    return VoiceBackend()


@pytest.fixture
def query(health_context):
    return QueryRequest(query="what is my blood sugar", language=SupportedLanguage.HI_IN, context=health_context)


async def serve(backend):
    app = web.Application()
    app.router.add_post("/api/voice/query", backend.handle)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


@pytest.mark.integration
@pytest.mark.asyncio
class TestRemoteQueryResponder:

    async def test_valid_answer(self, backend, query):
        server = await serve(backend)
        try:
            responder = RemoteQueryResponder(str(server.make_url("/api/voice/query")))
            response = await responder.answer(query)
        finally:
            await server.close()

        assert response.answer_text == "Your sugar is a little high."
        assert response.actions[0].id == "reminder"

    async def test_request_payload(self, backend, query):
        server = await serve(backend)
        try:
            await RemoteQueryResponder(str(server.make_url("/api/voice/query"))).answer(query)
        finally:
            await server.close()

        payload = backend.received[0]
        assert payload["query"] == "what is my blood sugar"
        assert payload["language"] == "hi-IN"
        assert payload["user_profile"]["name"] == "John Doe"
        assert payload["recent_reports"][0]["value"] == "145 mg/dL"

    async def test_server_error_is_unavailable(self, backend, query):
        backend.status = 500
        backend.body = {"detail": "boom"}
        server = await serve(backend)
        try:
            with pytest.raises(ResponderUnavailableError):
                await RemoteQueryResponder(str(server.make_url("/api/voice/query"))).answer(query)
        finally:
            await server.close()

    async def test_invalid_json_is_payload_error(self, backend, query):
        backend.raw_body = "{not json"
        server = await serve(backend)
        try:
            with pytest.raises(ResponderPayloadError):
                await RemoteQueryResponder(str(server.make_url("/api/voice/query"))).answer(query)
        finally:
            await server.close()

    async def test_undecodable_body_is_payload_error(self, backend, query):
        backend.raw_bytes = b"\xff\xfe\x00{"
        server = await serve(backend)
        try:
            with pytest.raises(ResponderPayloadError):
                await RemoteQueryResponder(str(server.make_url("/api/voice/query"))).answer(query)
        finally:
            await server.close()

    async def test_schema_mismatch_is_payload_error(self, backend, query):
        backend.body = {"answer": "missing the answer_text field"}
        server = await serve(backend)
        try:
            with pytest.raises(ResponderPayloadError):
                await RemoteQueryResponder(str(server.make_url("/api/voice/query"))).answer(query)
        finally:
            await server.close()

    async def test_timeout_is_unavailable(self, backend, query):
        backend.delay = 1.0
        server = await serve(backend)
        try:
            responder = RemoteQueryResponder(str(server.make_url("/api/voice/query")), timeout_seconds=0.1)
            with pytest.raises(ResponderUnavailableError):
                await responder.answer(query)
        finally:
            await server.close()

    async def test_unreachable_is_unavailable(self, query):
        responder = RemoteQueryResponder("http://127.0.0.1:1/api/voice/query", timeout_seconds=2.0)
        with pytest.raises(ResponderUnavailableError):
            await responder.answer(query)


@pytest.mark.integration
@pytest.mark.asyncio
class TestResilientResponder:

    async def test_remote_answer_used(self, backend, query):
        server = await serve(backend)
        try:
            responder = ResilientResponder(RemoteQueryResponder(str(server.make_url("/api/voice/query"))))
            outcome = await responder.answer(query)
        finally:
            await server.close()

        assert outcome.source is AnswerSource.REMOTE
        assert outcome.failure is None

    async def test_server_error_falls_back(self, backend, query):
        backend.status = 503
        server = await serve(backend)
        try:
            responder = ResilientResponder(RemoteQueryResponder(str(server.make_url("/api/voice/query"))))
            outcome = await responder.answer(query)
        finally:
            await server.close()

        assert outcome.source is AnswerSource.FALLBACK
        assert outcome.failure is FailureKind.UNAVAILABLE
        assert "145 mg/dL" in outcome.response.answer_text
        assert outcome.response.answer_text.startswith("आपका")

    async def test_malformed_answer_falls_back(self, backend, query):
        backend.body = {"answer_text": ""}
        server = await serve(backend)
        try:
            responder = ResilientResponder(RemoteQueryResponder(str(server.make_url("/api/voice/query"))))
            outcome = await responder.answer(query)
        finally:
            await server.close()

        assert outcome.source is AnswerSource.FALLBACK
        assert outcome.failure is FailureKind.MALFORMED

    async def test_undecodable_answer_falls_back_as_malformed(self, backend, query):
        backend.raw_bytes = b"\xff\xfe\x00{"
        server = await serve(backend)
        try:
            responder = ResilientResponder(RemoteQueryResponder(str(server.make_url("/api/voice/query"))))
            outcome = await responder.answer(query)
        finally:
            await server.close()

        assert outcome.source is AnswerSource.FALLBACK
        assert outcome.failure is FailureKind.MALFORMED

    async def test_unexpected_error_falls_back(self, query):
        class Broken:
            async def answer(self, request):
                raise KeyError("answer_text")

        outcome = await ResilientResponder(Broken()).answer(query)

        assert outcome.source is AnswerSource.FALLBACK
        assert outcome.failure is FailureKind.UNEXPECTED

    async def test_without_remote_uses_fallback(self, query):
        outcome = await ResilientResponder(None).answer(query)

        assert outcome.source is AnswerSource.FALLBACK
        assert outcome.failure is None
