"""Tests for the node dispatcher and the built-in node handlers."""

import pytest

from nodeflow.core.exceptions import HttpProxyError
from nodeflow.engine.dispatcher import NodeDispatcher, build_handler_groups
from nodeflow.engine.node_registry import NodeTypeDefinition
from nodeflow.engine.types import NodeCategory
from nodeflow.nodes import TriggerNode

from conftest import make_context


# =============================================================================
# Dispatch
# =============================================================================


@pytest.mark.asyncio
async def test_unknown_node_type(dispatcher):
    result = await dispatcher.execute_node(make_context("nope"))
    assert result.success is False
    assert result.error == "Unknown node type: nope"


@pytest.mark.asyncio
async def test_unknown_sub_type_in_category(registry, dispatcher):
    registry.register(
        NodeTypeDefinition(
            type="loop",
            category=NodeCategory.LOGIC,
            display_name="Loop",
            description="Not handled",
        )
    )
    result = await dispatcher.execute_node(make_context("loop"))
    assert result.success is False
    assert result.error == "Unknown logic node type: loop"


@pytest.mark.asyncio
async def test_unsupported_category(registry, services):
    dispatcher = NodeDispatcher(registry, services, handlers=build_handler_groups([TriggerNode]))
    result = await dispatcher.execute_node(make_context("aiTextGenerator"))
    assert result.success is False
    assert result.error == "Unsupported node category: ai"


@pytest.mark.asyncio
async def test_node_timeout(dispatcher):
    context = make_context("delay", {"duration": "2", "unit": "seconds"})
    result = await dispatcher.execute_node(context, timeout=0.05)
    assert result.success is False
    assert result.error == "Node execution timed out after 0.05s"


# =============================================================================
# Triggers
# =============================================================================


@pytest.mark.asyncio
async def test_trigger_passes_input_through(dispatcher):
    result = await dispatcher.execute_node(make_context("webhook", input_value={"a": 1}))
    assert result.success is True
    assert result.output == {"a": 1}


@pytest.mark.asyncio
async def test_trigger_without_input_emits_record(dispatcher):
    result = await dispatcher.execute_node(make_context("schedule", {"cron": "0 * * * *"}))
    assert result.success is True
    assert result.output["config"] == {"cron": "0 * * * *"}
    assert "triggeredAt" in result.output


# =============================================================================
# AI
# =============================================================================


@pytest.mark.asyncio
async def test_ai_node_resolves_config(dispatcher, fake_ai):
    context = make_context(
        "aiTextGenerator",
        {"prompt": "Summarize {{fetch.data.title}}", "temperature": "0.2"},
        input_value={"x": 1},
        previous_outputs={"fetch": {"data": {"title": "Release notes"}}},
    )
    result = await dispatcher.execute_node(context)

    assert result.success is True
    assert result.output["generatedText"] == "generated: Summarize Release notes"
    assert fake_ai.calls[0]["type"] == "aiTextGenerator"
    assert fake_ai.calls[0]["config"]["temperature"] == "0.2"


# =============================================================================
# HTTP Request
# =============================================================================


@pytest.mark.asyncio
async def test_http_request_get_sends_no_body(dispatcher, fake_http):
    context = make_context(
        "httpRequest",
        {"url": "https://api.example.com/users/{{input.id}}", "method": "GET", "body": '{"a": 1}'},
        input_value={"id": 42},
    )
    result = await dispatcher.execute_node(context)

    assert result.success is True
    assert result.output == fake_http.response
    assert fake_http.calls == [
        {"url": "https://api.example.com/users/42", "method": "GET", "headers": "{}", "body": None}
    ]


@pytest.mark.asyncio
async def test_http_request_post_resolves_body(dispatcher, fake_http):
    context = make_context(
        "httpRequest",
        {"url": "example.com", "method": "post", "body": '{"name": "{{input.name}}"}'},
        input_value={"name": "Ada"},
    )
    await dispatcher.execute_node(context)

    assert fake_http.calls[0]["method"] == "POST"
    assert fake_http.calls[0]["body"] == '{"name": "Ada"}'


@pytest.mark.asyncio
async def test_http_request_requires_url(dispatcher, fake_http):
    result = await dispatcher.execute_node(make_context("httpRequest", {"url": "  "}))
    assert result.success is False
    assert result.error == "URL is required"
    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_http_request_proxy_failure(dispatcher, fake_http):
    fake_http.error = HttpProxyError("Connection refused", url="https://down.example.com")
    result = await dispatcher.execute_node(make_context("httpRequest", {"url": "https://down.example.com"}))
    assert result.success is False
    assert result.error == "Connection refused"


# =============================================================================
# Data Transform
# =============================================================================


@pytest.mark.asyncio
async def test_data_transform_attribute_access(dispatcher):
    context = make_context(
        "dataTransform",
        {"code": "return {'doubled': input.data.value * 2}"},
        input_value={"data": {"value": 21}},
    )
    result = await dispatcher.execute_node(context)
    assert result.success is True
    assert result.output == {"doubled": 42}


@pytest.mark.asyncio
async def test_data_transform_reads_previous_nodes(dispatcher):
    context = make_context(
        "dataTransform",
        {"code": "names = [u['name'] for u in previousNodes['users']]\nreturn ', '.join(names)"},
        previous_outputs={"users": [{"name": "a"}, {"name": "b"}]},
    )
    result = await dispatcher.execute_node(context)
    assert result.output == "a, b"


@pytest.mark.asyncio
async def test_data_transform_exception_becomes_failure(dispatcher):
    context = make_context("dataTransform", {"code": "raise ValueError('boom')"})
    result = await dispatcher.execute_node(context)
    assert result.success is False
    assert result.error == "boom"


# =============================================================================
# Send Email
# =============================================================================


@pytest.mark.asyncio
async def test_send_email_resolves_fields(dispatcher):
    context = make_context(
        "sendEmail",
        {"to": "{{input.email}}", "subject": "Hi {{input.name}}", "body": "Score: {{input.score}}"},
        input_value={"email": "ada@example.com", "name": "Ada", "score": 9},
    )
    result = await dispatcher.execute_node(context)

    assert result.success is True
    assert result.output["sent"] is True
    assert result.output["to"] == "ada@example.com"
    assert result.output["subject"] == "Hi Ada"
    assert result.output["body"] == "Score: 9"
    assert "sentAt" in result.output
    assert "html" not in result.output


@pytest.mark.asyncio
async def test_send_email_markdown_body(dispatcher):
    context = make_context("sendEmail", {"to": "a@b.c", "body": "# Report", "bodyFormat": "markdown"})
    result = await dispatcher.execute_node(context)
    assert "<h1>Report</h1>" in result.output["html"]


# =============================================================================
# If / Else
# =============================================================================


@pytest.mark.asyncio
async def test_if_else_true(dispatcher):
    context = make_context(
        "ifElse",
        {"condition": "input.value > 10", "operator": "expression"},
        input_value={"value": 11},
    )
    result = await dispatcher.execute_node(context)
    assert result.output == {"condition": True, "branch": "true", "input": {"value": 11}}


@pytest.mark.asyncio
async def test_if_else_false(dispatcher):
    context = make_context(
        "ifElse",
        {"condition": "input.value > 10", "operator": "javascript"},
        input_value={"value": 3},
    )
    result = await dispatcher.execute_node(context)
    assert result.output["condition"] is False
    assert result.output["branch"] == "false"


@pytest.mark.asyncio
async def test_if_else_unknown_operator_is_false(dispatcher):
    context = make_context("ifElse", {"condition": "True", "operator": "equals"})
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "false"


@pytest.mark.asyncio
async def test_if_else_bad_condition_fails(dispatcher):
    context = make_context("ifElse", {"condition": "input.value >", "operator": "expression"}, input_value={})
    result = await dispatcher.execute_node(context)
    assert result.success is False


@pytest.mark.asyncio
async def test_if_else_condition_on_items_field(dispatcher):
    context = make_context(
        "ifElse",
        {"condition": "len(input.items) > 1", "operator": "expression"},
        input_value={"items": [1, 2]},
    )
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "true"
    assert result.output["input"] == {"items": [1, 2]}


# =============================================================================
# Switch
# =============================================================================


@pytest.mark.asyncio
async def test_switch_matches_case(dispatcher):
    context = make_context("switch", {"property": "input.status", "cases": "A\nB"}, input_value={"status": "B"})
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "case_1"
    assert result.output["matchedCase"] == "B"
    assert result.output["cases"] == ["A", "B"]


@pytest.mark.asyncio
async def test_switch_default(dispatcher):
    context = make_context("switch", {"property": "input.status", "cases": "A\nB"}, input_value={"status": "C"})
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "default"
    assert result.output["matchedCase"] is None
    assert result.output["value"] == "C"


@pytest.mark.asyncio
async def test_switch_blank_property_uses_input(dispatcher):
    context = make_context("switch", {"property": "  ", "cases": " A \n\nB\nA"}, input_value="A")
    result = await dispatcher.execute_node(context)
    assert result.output["cases"] == ["A", "B"]
    assert result.output["branch"] == "case_0"


@pytest.mark.asyncio
async def test_switch_reads_previous_node(dispatcher):
    context = make_context(
        "switch",
        {"property": "fetch.status", "cases": "200\n404"},
        previous_outputs={"fetch": {"status": 404}},
    )
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "case_1"


@pytest.mark.asyncio
async def test_switch_unrooted_path_reads_input(dispatcher):
    context = make_context("switch", {"property": "kind", "cases": "x\ny"}, input_value={"kind": "y"})
    result = await dispatcher.execute_node(context)
    assert result.output["branch"] == "case_1"


# =============================================================================
# Delay
# =============================================================================


@pytest.mark.asyncio
async def test_delay_milliseconds(dispatcher):
    context = make_context("delay", {"duration": "5ms", "unit": "milliseconds"}, input_value={"a": 1})
    result = await dispatcher.execute_node(context)
    assert result.output == {"delayed": 5, "input": {"a": 1}}


@pytest.mark.asyncio
async def test_delay_seconds_are_converted(dispatcher):
    result = await dispatcher.execute_node(make_context("delay", {"duration": "0", "unit": "seconds"}))
    assert result.output["delayed"] == 0


@pytest.mark.asyncio
async def test_delay_negative_does_not_sleep(dispatcher):
    result = await dispatcher.execute_node(make_context("delay", {"duration": "-3", "unit": "seconds"}))
    assert result.success is True
    assert result.output["delayed"] == -3000


@pytest.mark.asyncio
async def test_delay_invalid_duration(dispatcher):
    result = await dispatcher.execute_node(make_context("delay", {"duration": "soon"}))
    assert result.success is False
    assert result.error == "Invalid delay duration: soon"
