"""Unit tests for the memorystack CLI."""

import json

import pytest
import respx
from click.testing import CliRunner
from httpx import Response

from memorystack_openclaw.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def base_args(base_url: str, api_key: str) -> list[str]:
    return ["--api-key", api_key, "--base-url", base_url]


@respx.mock
def test_search(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    route = respx.post(f"{api_url}/memories/search").mock(return_value=Response(200, json={
        "count": 1,
        "results": [{"id": "a", "content": "Likes tea", "memory_type": "preference", "confidence": 0.9}],
    }))

    result = runner.invoke(cli, base_args + ["search", "drinks", "--limit", "3", "--type", "preference"])

    assert result.exit_code == 0
    assert "Found 1 memories:" in result.output
    assert "- Likes tea [preference] (90%)" in result.output
    assert json.loads(route.calls.last.request.content) == {
        "query": "drinks",
        "limit": 3,
        "memory_type": "preference",
    }


@respx.mock
def test_search_no_results(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    respx.post(f"{api_url}/memories/search").mock(return_value=Response(200, json={"count": 0, "results": []}))

    result = runner.invoke(cli, base_args + ["search", "drinks"])

    assert result.exit_code == 0
    assert "No memories found." in result.output


@respx.mock
def test_search_failure_exits_nonzero(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    respx.post(f"{api_url}/memories/search").mock(return_value=Response(401, json={"detail": "bad key"}))

    result = runner.invoke(cli, base_args + ["search", "drinks"])

    assert result.exit_code == 1
    assert "Error: Search failed: bad key" in result.output


@respx.mock
def test_api_key_from_environment(runner: CliRunner, base_url: str, api_url: str) -> None:
    route = respx.get(f"{api_url}/stats").mock(return_value=Response(200, json={}))

    result = runner.invoke(cli, ["--base-url", base_url, "stats"], env={"MEMORYSTACK_API_KEY": "env_key"})

    assert result.exit_code == 0
    assert route.calls.last.request.headers["Authorization"] == "Bearer env_key"


@respx.mock
def test_stats(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    respx.get(f"{api_url}/stats").mock(return_value=Response(200, json={
        "totals": {"total_memories": 7, "total_api_calls": 9},
        "usage": {"current_month_api_calls": 3, "monthly_api_limit": 500},
    }))

    result = runner.invoke(cli, base_args + ["stats"])

    assert result.exit_code == 0
    assert "Total Memories:      7" in result.output
    assert "This Month's Calls:  3/500" in result.output
    assert "Plan:                Free" in result.output


@respx.mock
def test_add(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    route = respx.post(f"{api_url}/memories").mock(
        return_value=Response(200, json={"memories_created": 1, "memory_ids": ["m"]})
    )

    result = runner.invoke(cli, base_args + ["add", "Prefers window seats", "--type", "preference"])

    assert result.exit_code == 0
    assert '✓ Saved: "Prefers window seats"' in result.output
    assert json.loads(route.calls.last.request.content) == {
        "content": "Prefers window seats",
        "memory_type": "preference",
        "metadata": {"source": "openclaw_cli"},
    }


@pytest.mark.parametrize("answer", ["no", "y", "", "yes please"])
def test_deleteall_aborts_without_exact_confirmation(
    runner: CliRunner, base_args: list[str], api_url: str, answer: str
) -> None:
    with respx.mock(assert_all_called=False) as respx_mock:
        route = respx_mock.route(url__startswith=api_url).mock(
            return_value=Response(200, json={"count": 1, "results": [{"id": "a", "content": "one"}]})
        )

        result = runner.invoke(cli, base_args + ["deleteall"], input=f"{answer}\n")

    assert result.exit_code == 0
    assert "Aborted." in result.output
    assert route.call_count == 0


@respx.mock
def test_deleteall_confirmed(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    list_route = respx.get(f"{api_url}/memories").mock(return_value=Response(200, json={
        "count": 2,
        "results": [{"id": "a", "content": "one"}, {"id": "b", "content": "two"}],
    }))
    delete_route = respx.post(f"{api_url}/memories/bulk-delete").mock(
        return_value=Response(200, json={"deleted_count": 2})
    )

    result = runner.invoke(cli, base_args + ["deleteall"], input=" YES \n")

    assert result.exit_code == 0
    assert "Wiped 2 memories." in result.output
    assert list_route.calls.last.request.url.params["limit"] == "1000"
    assert json.loads(delete_route.calls.last.request.content) == {"memory_ids": ["a", "b"], "hard": True}


@respx.mock
def test_deleteall_nothing_to_delete(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    respx.get(f"{api_url}/memories").mock(return_value=Response(200, json={"count": 0, "results": []}))

    result = runner.invoke(cli, base_args + ["deleteall"], input="yes\n")

    assert result.exit_code == 0
    assert "No memories to delete." in result.output


@respx.mock
def test_malformed_body_exits_nonzero(runner: CliRunner, base_args: list[str], api_url: str) -> None:
    respx.get(f"{api_url}/stats").mock(return_value=Response(200, json={
        "usage": {"current_month_api_calls": 3, "monthly_api_limit": None},
    }))

    result = runner.invoke(cli, base_args + ["stats"])

    assert result.exit_code == 1
    assert "Error: Failed to get stats: Invalid response: usage.monthly_api_limit" in result.output
