from __future__ import annotations

import json
from typing import Any

import pytest

from mcphost.capabilities.registry import CapabilityRegistry
from mcphost.core.config import ServerConfig
from mcphost.core.protocol import parse_request
from mcphost.core.result import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    PARSE_ERROR,
    InvalidParamsError,
    MalformedRequestError,
)
from mcphost.mcp.dispatcher import LIFECYCLE_METHODS, RequestDispatcher


@pytest.fixture
def dispatcher(registry: CapabilityRegistry) -> RequestDispatcher:
    return RequestDispatcher(registry)


def _line(**payload: Any) -> str:
    return json.dumps({"jsonrpc": "2.0", **payload})


def test_tools_call_round_trip(dispatcher: RequestDispatcher) -> None:
    line = (
        '{"jsonrpc":"2.0","id":1,"method":"tools/call",'
        '"params":{"name":"greet","arguments":{"name":"Ada"}}}'
    )
    assert dispatcher.handle_line(line) == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"content": [{"type": "text", "text": "Hello, Ada!"}], "isError": False},
    }


def test_unknown_method_answers_inside_result(dispatcher: RequestDispatcher) -> None:
    line = '{"jsonrpc":"2.0","id":2,"method":"unknown/thing"}'
    assert dispatcher.handle_line(line) == {
        "jsonrpc": "2.0",
        "id": 2,
        "result": {"error": {"code": -32601, "message": "Method not found"}},
    }


def test_initialized_notification_is_silent(dispatcher: RequestDispatcher) -> None:
    assert dispatcher.handle_line('{"jsonrpc":"2.0","method":"initialized"}') is None


@pytest.mark.parametrize("method", sorted(LIFECYCLE_METHODS))
def test_lifecycle_methods_are_silent_even_with_id(
    dispatcher: RequestDispatcher, method: str
) -> None:
    assert dispatcher.handle_line(_line(id=7, method=method)) is None


def test_notifications_never_get_replies(dispatcher: RequestDispatcher) -> None:
    assert dispatcher.handle_line(_line(method="ping")) is None
    assert dispatcher.handle_line(_line(method="tools/list")) is None
    assert dispatcher.handle_line(_line(method="unknown/thing")) is None


def test_notification_still_invokes_tool(dispatcher: RequestDispatcher) -> None:
    import sample_capabilities

    sample_capabilities.CALLS.clear()
    line = _line(method="tools/call", params={"name": "greet", "arguments": {"name": "Ada"}})
    assert dispatcher.handle_line(line) is None
    assert sample_capabilities.CALLS == ["greet"]


def test_explicit_null_id_is_answered(dispatcher: RequestDispatcher) -> None:
    assert dispatcher.handle_line(_line(id=None, method="ping")) == {
        "jsonrpc": "2.0",
        "id": None,
        "result": {},
    }


def test_string_ids_are_echoed(dispatcher: RequestDispatcher) -> None:
    response = dispatcher.handle_line(_line(id="abc", method="ping"))
    assert response is not None
    assert response["id"] == "abc"


@pytest.mark.parametrize("request_id", [True, False, 1.5, -0.25, {"k": 1}, [1, "a"]])
def test_ids_of_any_json_type_are_echoed_unchanged(
    dispatcher: RequestDispatcher, request_id: Any
) -> None:
    response = dispatcher.handle_line(_line(id=request_id, method="ping"))
    assert response is not None
    assert response["id"] == request_id
    assert type(response["id"]) is type(request_id)


def test_invalid_request_salvages_ids_of_any_type(dispatcher: RequestDispatcher) -> None:
    with pytest.raises(MalformedRequestError) as excinfo:
        dispatcher.handle_line('{"jsonrpc":"2.0","id":true}')
    assert excinfo.value.request_id is True


def test_blank_lines_are_ignored(dispatcher: RequestDispatcher) -> None:
    assert dispatcher.handle_line("   \n") is None


def test_initialize_reports_server_identity(registry: CapabilityRegistry) -> None:
    config = ServerConfig(server_name="demo", server_version="2.1.0")
    dispatcher = RequestDispatcher(registry, config)

    response = dispatcher.handle_line(_line(id=1, method="initialize", params={}))

    assert response == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "protocolVersion": "2024-11-05",
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {"name": "demo", "version": "2.1.0"},
        },
    }


def test_initialize_defaults(dispatcher: RequestDispatcher) -> None:
    response = dispatcher.handle_line(_line(id=1, method="initialize"))
    assert response is not None
    assert response["result"]["serverInfo"] == {"name": "MCPServer", "version": "1.0.0"}


@pytest.mark.parametrize(
    ("method", "field", "first"),
    [
        ("tools/list", "tools", "greet"),
        ("prompts/list", "prompts", "code_review"),
    ],
)
def test_list_methods(dispatcher: RequestDispatcher, method: str, field: str, first: str) -> None:
    response = dispatcher.handle_line(_line(id=3, method=method))
    assert response is not None
    assert response["result"][field][0]["name"] == first


def test_resource_listings(dispatcher: RequestDispatcher) -> None:
    resources = dispatcher.handle_line(_line(id=4, method="resources/list"))
    templates = dispatcher.handle_line(_line(id=5, method="resources/templates/list"))

    assert resources is not None
    assert templates is not None
    assert [r["uri"] for r in resources["result"]["resources"]] == [
        "config://app",
        "memo://readme",
        "memo://broken",
    ]
    assert templates["result"]["resourceTemplates"][0]["uriTemplate"] == "file:///{path}"


def test_empty_registry_lists(registry: CapabilityRegistry) -> None:
    dispatcher = RequestDispatcher(CapabilityRegistry())
    response = dispatcher.handle_line(_line(id=1, method="tools/list"))
    assert response == {"jsonrpc": "2.0", "id": 1, "result": {"tools": []}}


def test_completion_is_empty(dispatcher: RequestDispatcher) -> None:
    response = dispatcher.handle_line(_line(id=9, method="completion/complete", params={}))
    assert response is not None
    assert response["result"] == {"completion": {"values": [], "hasMore": False}}


def test_handler_table_covers_protocol_methods(dispatcher: RequestDispatcher) -> None:
    assert {
        "initialize",
        "ping",
        "tools/list",
        "tools/call",
        "resources/list",
        "resources/read",
        "resources/templates/list",
        "prompts/list",
        "prompts/get",
        "completion/complete",
        "initialized",
        "notifications/initialized",
        "cancelled",
    } <= dispatcher.methods


def test_dispatch_returns_result_for_notifications(dispatcher: RequestDispatcher) -> None:
    request = parse_request(_line(method="ping"))
    assert request.is_notification
    assert dispatcher.dispatch(request) == {}


def test_invalid_json_raises_parse_error(dispatcher: RequestDispatcher) -> None:
    with pytest.raises(MalformedRequestError) as excinfo:
        dispatcher.handle_line("{not json")
    assert excinfo.value.code == PARSE_ERROR
    assert excinfo.value.request_id is None


@pytest.mark.parametrize(
    "line",
    ['{"jsonrpc":"2.0","id":4}', '{"jsonrpc":"2.0","id":4,"method":12}', "[1, 2]"],
)
def test_envelopes_without_method_are_invalid(dispatcher: RequestDispatcher, line: str) -> None:
    with pytest.raises(MalformedRequestError) as excinfo:
        dispatcher.handle_line(line)
    assert excinfo.value.code == INVALID_REQUEST


def test_invalid_request_keeps_salvaged_id(dispatcher: RequestDispatcher) -> None:
    with pytest.raises(MalformedRequestError) as excinfo:
        dispatcher.handle_line('{"jsonrpc":"2.0","id":4}')
    assert excinfo.value.request_id == 4


def test_invalid_params_carry_request_context(dispatcher: RequestDispatcher) -> None:
    with pytest.raises(InvalidParamsError) as excinfo:
        dispatcher.handle_line(_line(id=11, method="tools/call", params={}))
    assert excinfo.value.code == INVALID_PARAMS
    assert excinfo.value.request_id == 11
    assert excinfo.value.notification is False


def test_invalid_params_on_notification_are_flagged(dispatcher: RequestDispatcher) -> None:
    with pytest.raises(InvalidParamsError) as excinfo:
        dispatcher.handle_line(_line(method="resources/read", params={}))
    assert excinfo.value.notification is True
