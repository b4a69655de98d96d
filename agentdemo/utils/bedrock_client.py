"""AWS Bedrock chat client with retry logic and kernel tool dispatch."""

import asyncio
import dataclasses
import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from dotenv import load_dotenv
from semantic_kernel import Kernel
from semantic_kernel.functions import KernelArguments

from ..models.message import (
    AuthorRole,
    ContentItem,
    FunctionCallContent,
    FunctionResultContent,
    ImageContent,
    Message,
)
from .errors import RemoteCallError

# Ensure environment variables are loaded
load_dotenv()

logger = logging.getLogger(__name__)

CONTINUE_PROMPT = "Continue the conversation."


class BedrockClient:
    """
    Chat completion client for AWS Bedrock's Converse API.

    Provides:
    - Conversion of chat Messages to Converse turns
    - Automatic retry with exponential backoff on throttling/service errors
    - Tool calling against the plugins of a Semantic Kernel `Kernel`

    Failures surface as RemoteCallError; callers do not retry on their own.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        model_id: str = "amazon.nova-pro-v1:0",
        timeout: int = 120,
        max_retries: int = 3,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        max_tool_rounds: int = 5,
        runtime: Any = None,
    ):
        """
        Initialize Bedrock client.

        Args:
            region: AWS region for Bedrock service
            model_id: Converse-capable model id
            timeout: Connect/read timeout in seconds
            max_retries: Maximum number of attempts per call
            temperature: Sampling temperature (0.0 = deterministic)
            max_tokens: Maximum tokens to generate
            max_tool_rounds: Maximum tool-use round trips per completion
            runtime: Pre-built bedrock-runtime client (tests inject a stub)
        """
        self.region = region
        self.model_id = model_id
        self.max_retries = max(1, max_retries)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_tool_rounds = max_tool_rounds

        if runtime is not None:
            self.runtime = runtime
        else:
            config_kwargs: Dict[str, Any] = {
                "region_name": region,
                "connect_timeout": timeout,
                "read_timeout": timeout,
                "retries": {"max_attempts": 0},  # We handle retries manually
            }
            # botocore honours AWS_BEARER_TOKEN_BEDROCK when bearer auth is requested
            if os.getenv("AWS_BEARER_TOKEN_BEDROCK"):
                config_kwargs["signature_version"] = "bearer"
                logger.info("BedrockClient configured to use Amazon Bedrock API key authentication")
            else:
                logger.info("BedrockClient configured to use AWS IAM credentials (SigV4)")

            self.runtime = boto3.client("bedrock-runtime", config=Config(**config_kwargs))

        logger.info(
            f"Initialized BedrockClient: region={region}, "
            f"model={model_id}, max_retries={self.max_retries}"
        )

    @classmethod
    def from_config(cls, config) -> "BedrockClient":
        return cls(
            region=config.aws_region,
            model_id=config.bedrock.model_id,
            timeout=config.bedrock.timeout,
            max_retries=config.bedrock.max_retries,
            temperature=config.bedrock.temperature,
            max_tokens=config.bedrock.max_tokens,
            max_tool_rounds=config.bedrock.max_tool_rounds,
        )

    async def complete(
        self,
        history: Sequence[Message],
        instructions: str = "",
        kernel: Optional[Kernel] = None,
        agent_name: Optional[str] = None,
    ) -> Message:
        """
        Generate one reply to `history`.

        When `kernel` carries plugins, its functions are offered as tools and
        every tool call the model makes is executed before the final reply is
        returned. Tool calls and results are attached to the reply as items.

        Args:
            history: Conversation so far, oldest first
            instructions: System prompt
            kernel: Optional kernel whose functions are exposed as tools
            agent_name: Name of the replying agent; its own past messages are
                sent as assistant turns, everyone else's as user turns

        Returns:
            Agent Message with the reply text and any content items

        Raises:
            RemoteCallError: If the model call fails or the tool loop does not settle
        """
        messages = self.to_converse_messages(history, agent_name=agent_name)
        system_prompts = [{"text": instructions}] if instructions else None

        tool_config = None
        tool_index: Dict[str, Tuple[str, str]] = {}
        if kernel is not None:
            tool_config, tool_index = self.build_tool_config(kernel)

        items: List[ContentItem] = []

        for _ in range(self.max_tool_rounds + 1):
            parsed = await self.converse(messages, system_prompts=system_prompts, tool_config=tool_config)

            tool_uses = [block["toolUse"] for block in parsed["content"] if "toolUse" in block]
            if parsed["stop_reason"] != "tool_use" or not tool_uses:
                items.extend(self._content_items(parsed["content"]))
                return Message(
                    role=AuthorRole.AGENT,
                    content=parsed["text"],
                    name=agent_name,
                    items=tuple(items),
                )

            messages.append({"role": "assistant", "content": parsed["content"]})

            results = []
            for tool_use in tool_uses:
                call = FunctionCallContent(
                    id=tool_use.get("toolUseId", ""),
                    name=tool_use.get("name", ""),
                    arguments=dict(tool_use.get("input") or {}),
                )
                items.append(call)

                result_block, result_item = await self._dispatch_tool(kernel, tool_index, call)
                items.append(result_item)
                results.append(result_block)

            messages.append({"role": "user", "content": results})

        raise RemoteCallError.tool_loop_exceeded(self.max_tool_rounds)

    async def converse(
        self,
        messages: List[Dict[str, Any]],
        system_prompts: Optional[List[Dict[str, Any]]] = None,
        tool_config: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Invoke the model via Converse API with retry logic.

        Args:
            messages: Converse message dicts with 'role' and 'content'
            system_prompts: Optional system prompts
            tool_config: Optional tool configuration for function calling

        Returns:
            Parsed response with 'content', 'text', 'stop_reason', 'usage'

        Raises:
            RemoteCallError: If all retry attempts fail
        """
        params: Dict[str, Any] = {
            "modelId": self.model_id,
            "messages": messages,
            "inferenceConfig": {
                "temperature": self.temperature,
                "maxTokens": self.max_tokens
            }
        }

        if tool_config:
            params["toolConfig"] = tool_config

        if system_prompts:
            params["system"] = system_prompts

        for attempt in range(self.max_retries):
            try:
                logger.debug(
                    f"Invoking {self.model_id} (attempt {attempt + 1}/{self.max_retries})"
                )

                # boto3 is synchronous; keep the event loop free during the call
                response = await asyncio.to_thread(self.runtime.converse, **params)

                logger.info(
                    f"Converse call successful: "
                    f"stop_reason={response.get('stopReason')}, "
                    f"usage={response.get('usage')}"
                )

                return self._parse_converse_response(response)

            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                error_message = e.response.get("Error", {}).get("Message", str(e))

                logger.warning(
                    f"Bedrock API error (attempt {attempt + 1}/{self.max_retries}): "
                    f"code={error_code}, message={error_message}"
                )

                if self._is_retryable_error(error_code) and attempt < self.max_retries - 1:
                    # Exponential backoff: 1s, 2s, 4s, ...
                    wait_time = 2 ** attempt
                    logger.info(f"Retrying in {wait_time} seconds...")
                    await asyncio.sleep(wait_time)
                    continue

                logger.error(
                    f"Bedrock API call failed after {attempt + 1} attempts: "
                    f"{error_code} - {error_message}"
                )
                raise RemoteCallError.from_client_error(error=e, operation="converse")

            except Exception as e:
                logger.error(f"Unexpected error invoking {self.model_id}: {str(e)}")
                raise RemoteCallError.unexpected(e, operation="converse")

        # Should not reach here, but just in case
        raise RemoteCallError.unexpected(
            RuntimeError(f"no response after {self.max_retries} attempts"),
            operation="converse",
        )

    @staticmethod
    def to_converse_messages(
        history: Sequence[Message],
        agent_name: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Convert chat history to alternating Converse turns.

        Messages written by `agent_name` (or by any agent when `agent_name`
        is None) become assistant turns. Other agents' messages become user
        turns prefixed with the author's name. Consecutive turns with the same
        role are merged; the result always starts and ends with a user turn.
        """
        turns: List[Dict[str, Any]] = []

        for message in history:
            if not message.content:
                continue

            if message.role == AuthorRole.AGENT and (agent_name is None or message.name == agent_name):
                role, text = "assistant", message.content
            elif message.role == AuthorRole.AGENT:
                role, text = "user", f"{message.name or 'agent'}: {message.content}"
            else:
                role, text = "user", message.content

            if turns and turns[-1]["role"] == role:
                turns[-1]["content"].append({"text": text})
            else:
                turns.append({"role": role, "content": [{"text": text}]})

        if not turns or turns[0]["role"] != "user":
            turns.insert(0, {"role": "user", "content": [{"text": CONTINUE_PROMPT}]})
        if turns[-1]["role"] != "user":
            turns.append({"role": "user", "content": [{"text": CONTINUE_PROMPT}]})

        return turns

    @staticmethod
    def build_tool_config(kernel: Kernel) -> Tuple[Optional[Dict[str, Any]], Dict[str, Tuple[str, str]]]:
        """
        Describe the kernel's functions as Converse tools.

        Returns:
            (toolConfig dict or None when the kernel has no functions,
             mapping of tool name -> (plugin name, function name))
        """
        tools = []
        index: Dict[str, Tuple[str, str]] = {}

        for metadata in kernel.get_full_list_of_function_metadata():
            tool_name = f"{metadata.plugin_name}-{metadata.name}" if metadata.plugin_name else metadata.name

            properties: Dict[str, Any] = {}
            required: List[str] = []
            for param in metadata.parameters:
                if not getattr(param, "include_in_function_choices", True):
                    continue
                schema = dict(param.schema_data or {"type": "string"})
                if param.description:
                    schema.setdefault("description", param.description)
                properties[param.name] = schema
                if param.is_required:
                    required.append(param.name)

            input_schema: Dict[str, Any] = {"type": "object", "properties": properties}
            if required:
                input_schema["required"] = required

            tools.append({
                "toolSpec": {
                    "name": tool_name,
                    "description": metadata.description or tool_name,
                    "inputSchema": {"json": input_schema},
                }
            })
            index[tool_name] = (metadata.plugin_name, metadata.name)

        if not tools:
            return None, index

        logger.debug(f"Exposing {len(tools)} kernel functions as tools: {sorted(index)}")
        return {"tools": tools}, index

    async def _dispatch_tool(
        self,
        kernel: Optional[Kernel],
        tool_index: Dict[str, Tuple[str, str]],
        call: FunctionCallContent,
    ) -> Tuple[Dict[str, Any], FunctionResultContent]:
        if kernel is None or call.name not in tool_index:
            logger.warning(f"Model requested unknown tool '{call.name}'")
            return self._tool_error(call, f"Unknown tool: {call.name}")

        plugin_name, function_name = tool_index[call.name]
        try:
            result = await kernel.invoke(
                plugin_name=plugin_name,
                function_name=function_name,
                arguments=KernelArguments(**call.arguments),
            )
        except Exception as e:
            # The model gets the failure as a tool result and may recover
            logger.warning(f"Tool '{call.name}' failed: {str(e)}")
            return self._tool_error(call, str(e))

        value = _to_jsonable(result.value if result is not None else None)
        logger.info(f"Tool '{call.name}' called with {dict(call.arguments)}")

        block = {
            "toolResult": {
                "toolUseId": call.id,
                "content": [{"json": {"result": value}}],
                "status": "success",
            }
        }
        return block, FunctionResultContent(call_id=call.id, name=call.name, result=value)

    @staticmethod
    def _tool_error(call: FunctionCallContent, error_message: str) -> Tuple[Dict[str, Any], FunctionResultContent]:
        block = {
            "toolResult": {
                "toolUseId": call.id,
                "content": [{"text": error_message}],
                "status": "error",
            }
        }
        return block, FunctionResultContent(call_id=call.id, name=call.name, result=error_message)

    @staticmethod
    def _content_items(content: List[Dict[str, Any]]) -> List[ContentItem]:
        items: List[ContentItem] = []
        for block in content:
            if "image" in block:
                image = block["image"]
                items.append(ImageContent(
                    data=(image.get("source") or {}).get("bytes"),
                    format=image.get("format"),
                ))
        return items

    def _parse_converse_response(self, response: Dict[str, Any]) -> Dict[str, Any]:
        """
        Parse Converse API response into a simplified format.

        Args:
            response: Raw response from Converse API

        Returns:
            Parsed response dict with 'content', 'text', 'stop_reason', 'usage'
        """
        output = response.get("output", {})
        message = output.get("message", {})
        content = message.get("content", []) or []

        text_parts = [block["text"] for block in content if "text" in block]

        return {
            "content": content,
            "role": message.get("role", "assistant"),
            "text": "\n".join(text_parts),
            "stop_reason": response.get("stopReason", "unknown"),
            "usage": response.get("usage", {}),
        }

    def _is_retryable_error(self, error_code: str) -> bool:
        retryable_errors = {
            "ThrottlingException",
            "TooManyRequestsException",
            "ServiceUnavailableException",
            "InternalServerException",
            "ModelNotReadyException",
            "RequestTimeout",
            "RequestTimeoutException"
        }

        return error_code in retryable_errors


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.loads(json.dumps(value, default=str))
