"""Tests for chat turns with model-requested function calls."""

import json
from types import SimpleNamespace

import litellm
import pytest

from finix.core.modules.chat.models import ChatMessage
from finix.errors import ChatUnavailableError


def tool_call(call_id: str, name: str, args) -> SimpleNamespace:
    arguments = args if isinstance(args, str) else json.dumps(args)
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def completion(content: str | None = None, tool_calls: list | None = None) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=SimpleNamespace(total_tokens=10))


class FakeCompletion:
    """Replays scripted model responses and records each request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[dict] = []

    async def __call__(self, **kwargs):
        self.requests.append(kwargs)
        return self.responses.pop(0)


@pytest.fixture
def chat(core):
    return core.services.chat


@pytest.fixture
def fake_llm(monkeypatch):
    def install(*responses) -> FakeCompletion:
        fake = FakeCompletion(*responses)
        monkeypatch.setattr(litellm, "acompletion", fake)
        return fake

    return install


class TestProcessMessage:
    """Tests for the model and tool loop."""

    async def test_plain_answer(self, chat, fake_llm):
        llm = fake_llm(completion("Hello! How can I help?"))

        reply = await chat.process_message("u1", "hi", [ChatMessage(role="assistant", content="Welcome")])

        assert reply.message == "Hello! How can I help?"
        assert reply.function_calls == []
        assert reply.data is None
        assert not reply.requires_auth
        messages = llm.requests[0]["messages"]
        assert messages[0]["role"] == "system"
        assert 'userId "u1"' in messages[0]["content"]
        assert messages[1:] == [{"role": "assistant", "content": "Welcome"}, {"role": "user", "content": "hi"}]
        assert {tool["function"]["name"] for tool in llm.requests[0]["tools"]} >= {"getNetWorth", "initiateAuthentication"}

    async def test_data_call_without_session_requires_auth(self, chat, fake_llm, transport):
        llm = fake_llm(
            completion(tool_calls=[tool_call("c1", "getNetWorth", {"userId": "u1"})]),
            completion("Please connect your Fi Money account first."),
        )

        reply = await chat.process_message("u1", "What's my net worth?")

        assert reply.function_calls == ["getNetWorth"]
        assert reply.requires_auth
        assert reply.data is None
        assert transport.data_calls == []
        tool_message = llm.requests[1]["messages"][-1]
        assert tool_message["role"] == "tool"
        assert tool_message["tool_call_id"] == "c1"
        assert json.loads(tool_message["content"])["error"]["type"] == "authentication_required"

    async def test_data_call_with_session(self, chat, fake_llm, authenticate):
        await authenticate("u1")
        fake_llm(
            completion(tool_calls=[tool_call("c1", "getNetWorth", {"userId": "u1"})]),
            completion("Your net worth is 100."),
        )

        reply = await chat.process_message("u1", "What's my net worth?")

        assert reply.message == "Your net worth is 100."
        assert reply.data == {"getNetWorth": {"tool": "fetch_net_worth", "value": 100}}
        assert not reply.requires_auth

    async def test_system_prompt_reflects_connection(self, chat, fake_llm, authenticate):
        llm = fake_llm(completion("ok"), completion("ok"))

        await chat.process_message("u1", "hi")
        await authenticate("u1")
        await chat.process_message("u1", "hi")

        assert "NOT connected" in llm.requests[0]["messages"][0]["content"]
        assert "NOT connected" not in llm.requests[1]["messages"][0]["content"]

    async def test_handshake_through_chat(self, chat, fake_llm, core):
        fake_llm(
            completion(tool_calls=[tool_call("c1", "initiateAuthentication", {"userId": "u1", "phoneNumber": "+14155550100"})]),
            completion("Open the link and send me the passcode."),
            completion(tool_calls=[tool_call("c2", "completeAuthentication", {"userId": "u1", "passcode": "123456"})]),
            completion("Connected!"),
        )

        first = await chat.process_message("u1", "Connect my account, phone +14155550100")
        assert first.function_calls == ["initiateAuthentication"]
        assert "login_url" in first.data["initiateAuthentication"]

        second = await chat.process_message("u1", "The passcode is 123456")
        assert second.function_calls == ["completeAuthentication"]
        assert await core.services.session.store.is_authenticated("u1")

    async def test_malformed_arguments(self, chat, fake_llm, transport):
        llm = fake_llm(
            completion(tool_calls=[tool_call("c1", "getNetWorth", "{not json")]),
            completion("Sorry, something went wrong."),
        )

        reply = await chat.process_message("u1", "net worth")

        assert reply.function_calls == ["getNetWorth"]
        assert json.loads(llm.requests[1]["messages"][-1]["content"])["error"]["type"] == "invalid_input"
        assert transport.calls == []

    async def test_tool_rounds_are_bounded(self, chat, fake_llm):
        """Test that a model asking for tools forever gets one final call without tools."""
        looping = [completion(tool_calls=[tool_call(f"c{i}", "getAuthenticationStatus", {"userId": "u1"})]) for i in range(3)]
        llm = fake_llm(*looping, completion("Here is what I found."))

        reply = await chat.process_message("u1", "status?")

        assert reply.message == "Here is what I found."
        assert reply.function_calls == ["getAuthenticationStatus"] * 3
        assert len(llm.requests) == 4
        assert llm.requests[-1]["tools"] is None


class TestAvailability:
    async def test_missing_api_key(self, config, transport, clock):
        from finix.core.core import Core

        core = Core(config.model_copy(update={"llm_api_key": ""}), transport=transport, clock=clock)

        with pytest.raises(ChatUnavailableError, match="not configured"):
            await core.services.chat.process_message("u1", "hi")
        assert not (await core.services.chat.status("u1")).available

    async def test_model_failure_wrapped(self, chat, monkeypatch):
        async def fail(**kwargs):
            raise RuntimeError("quota exceeded")

        monkeypatch.setattr(litellm, "acompletion", fail)

        with pytest.raises(ChatUnavailableError) as exc_info:
            await chat.process_message("u1", "hi")
        assert exc_info.value.retryable


class TestStatusAndSuggestions:
    async def test_anonymous(self, chat):
        status = await chat.status("u1")

        assert status.available
        assert status.requires_auth
        assert await chat.suggestions("u1") == ["Connect my Fi Money account", "How does FiNIX work?", "What financial data can you access?", "Is my data secure?"]

    async def test_authenticated(self, chat, authenticate):
        await authenticate("u1")

        status = await chat.status("u1")

        assert status.authenticated
        assert not status.requires_auth
        assert "What's my current net worth?" in await chat.suggestions("u1")
