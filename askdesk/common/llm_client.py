"""
Provider-agnostic LLM client for askdesk.

Supports Google Gemini, Anthropic, and OpenAI with a shared async
interface that accepts provider-neutral ``ChatMessage`` lists and an
optional tool catalog, and returns an ``LLMResponse`` holding text and/or
tool calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .schemas import ChatMessage, LLMResponse, ToolDescriptor, ToolInvocationRequest

logger = logging.getLogger("askdesk.common.llm_client")


class LLMClient:
    """Unified text generation and tool-calling client across LLM providers."""

    def __init__(
        self,
        provider: str = "google",
        model: str = "",
        google_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
    ) -> None:
        self.provider = (provider or "google").lower()
        self.model = model
        self._client = None

        if self.provider == "auto":
            raise ValueError('"auto" provider must be resolved before creating LLMClient.')

        if self.provider == "google":
            if not google_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                from google import genai

                self._client = genai.Client(api_key=google_api_key)
            except ImportError:
                logger.warning("google-genai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Gemini client: %s", e)
            return

        if self.provider == "anthropic":
            if not anthropic_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                import anthropic

                self._client = anthropic.AsyncAnthropic(api_key=anthropic_api_key)
            except ImportError:
                logger.warning("anthropic package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client: %s", e)
            return

        if self.provider == "openai":
            if not openai_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                from openai import AsyncOpenAI

                self._client = AsyncOpenAI(api_key=openai_api_key)
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client: %s", e)
            return

        logger.warning("Unsupported LLM provider: %s", self.provider)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: Optional[Sequence[ToolDescriptor]] = None,
        system: Optional[str] = None,
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("LLM client is not available")

        if self.provider == "google":
            return await self._generate_google(messages, tools, system, max_tokens, timeout)
        if self.provider == "anthropic":
            return await self._generate_anthropic(messages, tools, system, max_tokens, timeout)
        if self.provider == "openai":
            return await self._generate_openai(messages, tools, system, max_tokens, timeout)

        raise RuntimeError(f"Unsupported LLM provider: {self.provider}")

    # ---------- Google Gemini ---------- #

    async def _generate_google(self, messages, tools, system, max_tokens, timeout) -> LLMResponse:
        from google.genai import types

        config_kwargs: Dict[str, Any] = {"max_output_tokens": max_tokens}
        if system:
            config_kwargs["system_instruction"] = system
        if tools:
            config_kwargs["tools"] = [
                types.Tool(function_declarations=[
                    types.FunctionDeclaration(
                        name=tool.name,
                        description=tool.description,
                        parameters_json_schema=tool.input_schema,
                    )
                    for tool in tools
                ])
            ]

        response = await asyncio.wait_for(
            self._client.aio.models.generate_content(
                model=self.model,
                contents=[self._to_google_content(m) for m in messages],
                config=types.GenerateContentConfig(**config_kwargs),
            ),
            timeout=timeout,
        )

        calls = [
            ToolInvocationRequest(
                name=fc.name,
                arguments=dict(fc.args or {}),
                call_id=fc.id or f"call_{fc.name}",
            )
            for fc in (response.function_calls or [])
        ]
        if calls:
            return LLMResponse(tool_calls=calls)
        return LLMResponse(text=(response.text or "").strip())

    @staticmethod
    def _to_google_content(message: ChatMessage):
        from google.genai import types

        if message.tool_call is not None:
            part = types.Part.from_function_call(
                name=message.tool_call.name,
                args=message.tool_call.arguments,
            )
            return types.Content(role="model", parts=[part])
        if message.tool_result is not None:
            key = "error" if message.tool_result.is_error else "result"
            part = types.Part.from_function_response(
                name=message.tool_result.name,
                response={key: message.tool_result.text},
            )
            return types.Content(role="user", parts=[part])
        role = "model" if message.role == "assistant" else "user"
        return types.Content(role=role, parts=[types.Part.from_text(text=message.text or "")])

    # ---------- Anthropic ---------- #

    async def _generate_anthropic(self, messages, tools, system, max_tokens, timeout) -> LLMResponse:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [self._to_anthropic_message(m) for m in messages],
            "timeout": timeout,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.input_schema}
                for t in tools
            ]

        response = await self._client.messages.create(**kwargs)

        texts: List[str] = []
        calls: List[ToolInvocationRequest] = []
        for block in response.content:
            if block.type == "tool_use":
                calls.append(ToolInvocationRequest(
                    name=block.name,
                    arguments=dict(block.input or {}),
                    call_id=block.id,
                ))
            elif block.type == "text":
                texts.append(block.text)
        return LLMResponse(text="".join(texts).strip(), tool_calls=calls)

    @staticmethod
    def _to_anthropic_message(message: ChatMessage) -> Dict[str, Any]:
        if message.tool_call is not None:
            return {
                "role": "assistant",
                "content": [{
                    "type": "tool_use",
                    "id": message.tool_call.call_id,
                    "name": message.tool_call.name,
                    "input": message.tool_call.arguments,
                }],
            }
        if message.tool_result is not None:
            return {
                "role": "user",
                "content": [{
                    "type": "tool_result",
                    "tool_use_id": message.tool_result.call_id,
                    "content": message.tool_result.text,
                    "is_error": message.tool_result.is_error,
                }],
            }
        return {"role": message.role, "content": message.text or ""}

    # ---------- OpenAI ---------- #

    async def _generate_openai(self, messages, tools, system, max_tokens, timeout) -> LLMResponse:
        payload: List[Dict[str, Any]] = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend(self._to_openai_message(m) for m in messages)

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": payload,
            "timeout": timeout,
        }
        if tools:
            kwargs["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.input_schema,
                    },
                }
                for t in tools
            ]

        response = await self._client.chat.completions.create(**kwargs)
        message = response.choices[0].message

        calls = [
            ToolInvocationRequest(
                name=call.function.name,
                arguments=json.loads(call.function.arguments or "{}"),
                call_id=call.id,
            )
            for call in (message.tool_calls or [])
        ]
        return LLMResponse(text=(message.content or "").strip(), tool_calls=calls)

    @staticmethod
    def _to_openai_message(message: ChatMessage) -> Dict[str, Any]:
        if message.tool_call is not None:
            return {
                "role": "assistant",
                "content": None,
                "tool_calls": [{
                    "id": message.tool_call.call_id,
                    "type": "function",
                    "function": {
                        "name": message.tool_call.name,
                        "arguments": json.dumps(message.tool_call.arguments),
                    },
                }],
            }
        if message.tool_result is not None:
            return {
                "role": "tool",
                "tool_call_id": message.tool_result.call_id,
                "content": message.tool_result.text,
            }
        return {"role": message.role, "content": message.text or ""}


def create_llm_client(llm_config) -> LLMClient:
    """Build an LLMClient for the configured provider."""
    models = {
        "google": llm_config.google_model,
        "anthropic": llm_config.anthropic_model,
        "openai": llm_config.openai_model,
    }
    return LLMClient(
        provider=llm_config.provider,
        model=models.get((llm_config.provider or "").lower(), ""),
        google_api_key=llm_config.google_api_key,
        anthropic_api_key=llm_config.anthropic_api_key,
        openai_api_key=llm_config.openai_api_key,
    )
