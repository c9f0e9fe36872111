"""
Tests for toolreplay.tools.executor — the agent-side tool calling loop

Tests cover:
- Plain answers returned without tool execution
- Legacy function_call and current tool_calls replay formats
- Unknown tools and failing tools turned into error results
- Iteration limit
"""

from unittest.mock import AsyncMock

import pytest

from toolreplay.llm import LLMResponse
from toolreplay.tools import ToolCall, ToolDefinition, ToolExecutor, ToolRegistry
from toolreplay.tools.executor import GIVE_UP_MESSAGE


def _make_llm(*responses):
    llm = AsyncMock()
    llm.chat_completion = AsyncMock(side_effect=list(responses))
    return llm


def _legacy_call(name="doSomething", arguments=None):
    return LLMResponse(content="", tool_calls=[ToolCall(id="", name=name, arguments=arguments or {"content": "Hello"})])


def _sent_messages(llm, call_index):
    return llm.chat_completion.call_args_list[call_index].kwargs["messages"]


@pytest.fixture
def registry(counter):
    return ToolRegistry([counter.as_tool()])


class TestRunWithTools:

    @pytest.mark.asyncio
    async def test_plain_answer(self, registry, counter):
        llm = _make_llm(LLMResponse(content="hi"))
        executor = ToolExecutor(llm, registry)

        assert await executor.run_with_tools([{"role": "user", "content": "x"}]) == "hi"
        assert counter.count() == 0
        kwargs = llm.chat_completion.call_args.kwargs
        assert kwargs["tools"][0]["function"]["name"] == "doSomething"

    @pytest.mark.asyncio
    async def test_legacy_function_call(self, registry, counter):
        llm = _make_llm(_legacy_call(), LLMResponse(content="Do something has been called."))
        executor = ToolExecutor(llm, registry)

        answer = await executor.run_with_tools([{"role": "user", "content": "ignored..."}])

        assert answer == "Do something has been called."
        assert counter.count() == 1
        assert counter.calls == [{"content": "Hello"}]

        followup = _sent_messages(llm, 1)
        assert followup[1]["role"] == "assistant"
        assert followup[1]["function_call"]["name"] == "doSomething"
        assert "tool_calls" not in followup[1]
        assert followup[2] == {"role": "function", "name": "doSomething", "content": "ignored"}

    @pytest.mark.asyncio
    async def test_tool_calls_format(self, registry, counter):
        first = LLMResponse(
            content="",
            tool_calls=[
                ToolCall(id="call_1", name="doSomething", arguments={"content": "a"}),
                ToolCall(id="call_2", name="doSomething", arguments={"content": "b"}),
            ],
        )
        llm = _make_llm(first, LLMResponse(content="done"))
        executor = ToolExecutor(llm, registry)

        assert await executor.run_with_tools([{"role": "user", "content": "x"}]) == "done"
        assert counter.count() == 2

        followup = _sent_messages(llm, 1)
        assert [tc["id"] for tc in followup[1]["tool_calls"]] == ["call_1", "call_2"]
        assert followup[2] == {"role": "tool", "tool_call_id": "call_1", "content": "ignored"}
        assert followup[3]["tool_call_id"] == "call_2"

    @pytest.mark.asyncio
    async def test_does_not_mutate_input(self, registry):
        llm = _make_llm(_legacy_call(), LLMResponse(content="done"))
        messages = [{"role": "user", "content": "x"}]
        await ToolExecutor(llm, registry).run_with_tools(messages)
        assert len(messages) == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_iterations(self, registry, counter):
        llm = _make_llm(*[_legacy_call() for _ in range(3)])
        executor = ToolExecutor(llm, registry, max_iterations=3)

        assert await executor.run_with_tools([{"role": "user", "content": "x"}]) == GIVE_UP_MESSAGE
        assert counter.count() == 3

    @pytest.mark.asyncio
    async def test_no_tools_offered(self):
        llm = _make_llm(LLMResponse(content="hi"))
        await ToolExecutor(llm, ToolRegistry()).run_with_tools([{"role": "user", "content": "x"}])
        assert llm.chat_completion.call_args.kwargs["tools"] is None

    def test_requires_llm_client(self, registry):
        with pytest.raises(ValueError):
            ToolExecutor(None, registry)


class TestExecuteTool:

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        executor = ToolExecutor(AsyncMock(), registry)
        result = await executor.execute_tool(ToolCall(id="c", name="missing"))
        assert result.is_error is True
        assert "Unknown tool" in result.content

    @pytest.mark.asyncio
    async def test_failing_tool(self):
        def boom(args):
            raise RuntimeError("kaput")

        registry = ToolRegistry([ToolDefinition("boom", "fails", {"type": "object"}, boom)])
        result = await ToolExecutor(AsyncMock(), registry).execute_tool(ToolCall(id="c", name="boom"))
        assert result.is_error is True
        assert "kaput" in result.content

    @pytest.mark.asyncio
    async def test_async_executor_and_dict_result(self):
        async def lookup(args):
            return {"value": args["q"]}

        registry = ToolRegistry([ToolDefinition("lookup", "async", {"type": "object"}, lookup)])
        result = await ToolExecutor(AsyncMock(), registry).execute_tool(
            ToolCall(id="c", name="lookup", arguments={"q": "x"})
        )
        assert result.is_error is False
        assert result.data == {"value": "x"}
        assert '"value": "x"' in result.content

    @pytest.mark.asyncio
    async def test_none_result_is_empty(self):
        registry = ToolRegistry([ToolDefinition("noop", "noop", {"type": "object"}, lambda args: None)])
        result = await ToolExecutor(AsyncMock(), registry).execute_tool(ToolCall(id="c", name="noop"))
        assert result.content == ""
