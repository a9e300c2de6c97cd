"""Unit tests for turn capture."""

import json

import pytest
import respx
from httpx import Response

from memorystack_openclaw import MemoryStackClient, build_capture_payload, capture_turn, collect_capture_texts
from memorystack_openclaw.capture import filter_notes, strip_injected_context


@pytest.mark.parametrize("length, kept", [(9, False), (10, True), (500, True), (501, False)])
def test_filter_notes_length_bounds(length: int, kept: bool) -> None:
    note = "x" * length
    assert filter_notes([note]) == ([note] if kept else [])


def test_filter_notes_trims_before_measuring() -> None:
    assert filter_notes(["   short   "]) == []
    assert filter_notes(["  long enough text  "]) == ["long enough text"]


def test_strip_injected_context_removes_every_block() -> None:
    text = (
        "<memorystack-context>\nold memories\n</memorystack-context>\n"
        "What is my name?\n"
        "<memorystack-context>more</memorystack-context>  tail"
    )
    assert strip_injected_context(text) == "What is my name?\ntail"


def test_wraps_user_and_assistant_messages() -> None:
    turn = [
        {"role": "user", "content": "Remember that I like tea"},
        {"role": "assistant", "content": [{"type": "text", "text": "Noted, you like tea."}]},
    ]
    assert collect_capture_texts(turn) == [
        "[role: user]\nRemember that I like tea\n[user:end]",
        "[role: assistant]\nNoted, you like tea.\n[assistant:end]",
    ]


def test_skips_other_roles_and_empty_content() -> None:
    turn = [
        {"role": "system", "content": "You are helpful and kind"},
        {"role": "tool", "content": "tool output is long enough"},
        {"role": "user", "content": ""},
        {"role": "assistant", "content": [{"type": "image", "data": "..."}]},
        "not a message",
    ]
    assert collect_capture_texts(turn) == []


def test_injected_context_is_not_captured() -> None:
    prompt = "<memorystack-context>\nfacts\n</memorystack-context>\nhow are you doing today?"
    texts = collect_capture_texts([{"role": "user", "content": prompt}])
    assert texts == ["[role: user]\nhow are you doing today?\n[user:end]"]


def test_oversized_message_dropped() -> None:
    turn = [
        {"role": "user", "content": "a" * 600},
        {"role": "assistant", "content": "a short but valid reply"},
    ]
    assert collect_capture_texts(turn) == ["[role: assistant]\na short but valid reply\n[assistant:end]"]


def test_payload_uses_last_turn_only() -> None:
    messages = [
        {"role": "user", "content": "first question here"},
        {"role": "assistant", "content": "first answer here"},
        {"role": "user", "content": "second question here"},
        {"role": "assistant", "content": "second answer here"},
    ]
    payload = build_capture_payload(messages)
    assert payload == (
        "[role: user]\nsecond question here\n[user:end]\n\n"
        "[role: assistant]\nsecond answer here\n[assistant:end]"
    )


def test_payload_none_when_nothing_survives() -> None:
    assert build_capture_payload([{"role": "user", "content": "b" * 800}]) is None


@pytest.mark.asyncio
@respx.mock
async def test_capture_turn_adds_payload(client: MemoryStackClient, api_url: str, turn_context: dict) -> None:
    route = respx.post(f"{api_url}/memories").mock(
        return_value=Response(200, json={"memories_created": 1, "memory_ids": ["mem_1"]})
    )
    event = {
        "success": True,
        "messages": [
            {"role": "user", "content": "I moved to Lisbon last week"},
            {"role": "assistant", "content": "Congratulations on the move!"},
        ],
    }

    async with client:
        await capture_turn(client, event, turn_context)

    assert route.called
    body = json.loads(route.calls.last.request.content)
    assert body["content"].startswith("[role: user]\nI moved to Lisbon last week")
    assert body["agent_id"] == "Sub-42"
    assert body["session_id"] == "agent:research:subagent:Sub-42"
    assert body["user_id"] == "user_7"
    assert body["team_id"] == "group_1"
    assert body["conversation_id"] == "channel_9"
    assert body["metadata"]["source"] == "clawdbot_auto_capture"
    assert body["metadata"]["provider"] == "anthropic"
    assert body["metadata"]["sender_name"] == "Ada"
    assert "timestamp" in body["metadata"]


@pytest.mark.asyncio
@respx.mock
async def test_capture_turn_omits_unset_metadata(client: MemoryStackClient, api_url: str) -> None:
    route = respx.post(f"{api_url}/memories").mock(
        return_value=Response(200, json={"memories_created": 1, "memory_ids": ["mem_1"]})
    )
    event = {"success": True, "messages": [{"role": "user", "content": "a plain message to keep"}]}

    async with client:
        await capture_turn(client, event, {})

    body = json.loads(route.calls.last.request.content)
    assert body["agent_id"] == "main"
    assert "user_id" not in body
    assert set(body["metadata"]) == {"source", "timestamp", "agent_id"}


@pytest.mark.asyncio
@pytest.mark.parametrize("event", [
    {"success": False, "messages": [{"role": "user", "content": "a plain message to keep"}]},
    {"success": True, "messages": []},
    {"success": True},
    {"success": True, "messages": [{"role": "user", "content": "x" * 600}]},
    {"success": True, "messages": [{"role": "system", "content": "a plain message to keep"}]},
])
async def test_capture_turn_skips_without_request(client: MemoryStackClient, api_url: str, event: dict) -> None:
    with respx.mock(assert_all_called=False) as respx_mock:
        route = respx_mock.post(f"{api_url}/memories").mock(
            return_value=Response(200, json={"memories_created": 1, "memory_ids": ["mem_1"]})
        )

        async with client:
            await capture_turn(client, event, {})

    assert route.call_count == 0


@pytest.mark.asyncio
@respx.mock
async def test_capture_turn_swallows_failures(client: MemoryStackClient, api_url: str) -> None:
    respx.post(f"{api_url}/memories").mock(return_value=Response(500, json={"detail": "boom"}))
    event = {"success": True, "messages": [{"role": "user", "content": "a plain message to keep"}]}

    async with client:
        await capture_turn(client, event, {})
