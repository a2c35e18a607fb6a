"""
Generator

Generation client on top of LLMClient.

Plain mode is a single backend call. Tool-augmented mode is a two-round
protocol run by ToolCallFlow:

    IDLE -> AWAITING_FIRST_RESPONSE -> PLAIN_ANSWER
                                    -> TOOL_REQUESTED -> AWAITING_TOOL_RESULT
                                       -> AWAITING_FINAL_RESPONSE -> PLAIN_ANSWER

Any failure moves the flow to FAILED and re-raises. Only one tool call per
question is supported.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from ..common.errors import (
    AskdeskError,
    BackendError,
    InvalidInput,
    UnsupportedMultiHopToolCall,
)
from ..common.schemas import (
    ChatMessage,
    LLMResponse,
    ToolDescriptor,
    ToolInvocationRequest,
    ToolResult,
)

logger = logging.getLogger("askdesk.retriever.generator")

ToolExecutor = Callable[[str, dict], Awaitable[str]]


class FlowState(str, Enum):
    IDLE = "idle"
    AWAITING_FIRST_RESPONSE = "awaiting_first_response"
    TOOL_REQUESTED = "tool_requested"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"
    AWAITING_FINAL_RESPONSE = "awaiting_final_response"
    PLAIN_ANSWER = "plain_answer"
    FAILED = "failed"


class ToolCallFlow:
    """One tool-augmented generation. Single use."""

    TERMINAL = (FlowState.PLAIN_ANSWER, FlowState.FAILED)

    def __init__(self, generate: Callable[..., Awaitable[LLMResponse]]) -> None:
        self._generate = generate
        self.state = FlowState.IDLE
        self.history: List[FlowState] = [FlowState.IDLE]
        self.tool_request: Optional[ToolInvocationRequest] = None

    def _enter(self, state: FlowState) -> None:
        self.state = state
        self.history.append(state)

    async def run(
        self,
        prompt: str,
        tools: Sequence[ToolDescriptor],
        execute_tool: ToolExecutor,
    ) -> str:
        if self.state != FlowState.IDLE:
            raise RuntimeError(f"ToolCallFlow already used (state: {self.state.value})")

        try:
            return await self._run(prompt, tools, execute_tool)
        except Exception:
            self._enter(FlowState.FAILED)
            raise

    async def _run(self, prompt, tools, execute_tool) -> str:
        messages = [ChatMessage.user(prompt)]

        self._enter(FlowState.AWAITING_FIRST_RESPONSE)
        first = await self._generate(messages, tools=tools)
        if not first.wants_tool:
            self._enter(FlowState.PLAIN_ANSWER)
            return first.text

        if len(first.tool_calls) > 1:
            raise UnsupportedMultiHopToolCall(
                f"Backend requested {len(first.tool_calls)} tool calls; only one is supported"
            )

        self._enter(FlowState.TOOL_REQUESTED)
        request = first.tool_calls[0]
        self.tool_request = request
        logger.info("Backend requested tool %s", request.name)

        self._enter(FlowState.AWAITING_TOOL_RESULT)
        output = await execute_tool(request.name, request.arguments)
        messages.append(ChatMessage.assistant_tool_call(request))
        messages.append(ChatMessage.tool_output(ToolResult(
            call_id=request.call_id,
            name=request.name,
            text=output,
        )))

        self._enter(FlowState.AWAITING_FINAL_RESPONSE)
        final = await self._generate(messages, tools=tools)
        if final.wants_tool:
            raise UnsupportedMultiHopToolCall(
                f"Backend requested a second tool call ({final.tool_calls[0].name})"
            )

        self._enter(FlowState.PLAIN_ANSWER)
        return final.text


class GenerationClient:
    """
    Wraps the generative backend.

    Backend failures are surfaced as BackendError; nothing is retried.
    """

    def __init__(
        self,
        llm,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ) -> None:
        """
        Args:
            llm: LLMClient or anything with a compatible async ``generate``
            system: Optional system instruction for every call
            max_tokens: Output token cap per call
            timeout: Per-call timeout in seconds
        """
        self._llm = llm
        self._system = system
        self._max_tokens = max_tokens
        self._timeout = timeout

    async def _call_backend(
        self,
        messages: Sequence[ChatMessage],
        tools: Optional[Sequence[ToolDescriptor]] = None,
    ) -> LLMResponse:
        try:
            return await self._llm.generate(
                messages,
                tools=tools,
                system=self._system,
                max_tokens=self._max_tokens,
                timeout=self._timeout,
            )
        except AskdeskError:
            raise
        except Exception as e:
            logger.error("Error generating response: %s", e)
            raise BackendError(f"Generation backend failed: {e}") from e

    async def complete(self, prompt: str) -> str:
        """Plain prompt completion."""
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidInput("Invalid input: prompt must be a non-empty string")

        response = await self._call_backend([ChatMessage.user(prompt)])
        return response.text

    async def complete_with_tools(
        self,
        prompt: str,
        tools: Sequence[ToolDescriptor],
        execute_tool: ToolExecutor,
    ) -> str:
        """
        Tool-augmented completion.

        Args:
            prompt: The user-facing prompt
            tools: Catalog offered to the backend
            execute_tool: Runs the requested tool, e.g. ``ToolSession.invoke``

        Returns:
            Final answer text
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidInput("Invalid input: prompt must be a non-empty string")

        flow = ToolCallFlow(self._call_backend)
        answer = await flow.run(prompt, tools, execute_tool)
        logger.debug("Tool flow path: %s", " -> ".join(s.value for s in flow.history))
        return answer
