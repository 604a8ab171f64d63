"""
Inference Gateway

The single point through which the application talks to the language model.

For every call it:
- Rejects oversized input before any network traffic
- Retries empty responses and server overload with exponential backoff
- Parses the response as JSON, re-checks the required top-level fields and
  validates the payload against the pydantic schema

Callers get either a fully validated payload or an InferenceError subclass;
nothing partial is ever returned.
"""

import asyncio
import json
import re
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, Type, TypeVar, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_snake
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ...config.settings import GatewayConfig, get_settings
from ...core.entities import ROW_ID_KEY, Deal, DealField
from ...core.log import get_logger
from ...errors import (
    InferenceError,
    InferenceServiceError,
    IncompleteResponse,
    MalformedResponse,
    SizeLimitExceeded,
    TransientServiceError,
)
from ..data_ingestion.ingestors import TRANSCRIPT_DELIMITER
from .prompts import DASHBOARD_PROMPT, JSON_FORMATTING_RULES, SYSTEM_PROMPT, TRANSCRIPT_PROMPT
from .schemas import DashboardAnalysis, Sentiment, TranscriptAnalysis, WireModel

logger = get_logger(__name__)

Payload = TypeVar("Payload", bound=WireModel)

EMPTY_RESPONSE_MESSAGE = "API returned an empty response."

# Failure texts that mark a server-side, retryable condition
_TRANSIENT_MARKERS = re.compile(r"\b(500|503)\b|overloaded|unavailable", re.IGNORECASE)


class InferenceClient(Protocol):
    """Anything that can send a prompt plus JSON schema and return raw text."""

    async def complete(self, prompt: str, schema: dict) -> str:
        ...


def _message_text(message: Any) -> str:
    """Text content of a chat model reply, whatever shape the provider uses."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return "" if content is None else str(content)


class LangChainInferenceClient:
    """
    InferenceClient backed by a LangChain chat model.

    The JSON schema is placed in the system message; the provider factory
    configures JSON output mode where the provider supports it.
    """

    def __init__(self, llm_provider=None):
        self._provider = llm_provider
        self._chain = None

    def _get_provider(self):
        """Lazy load LLM provider."""
        if self._provider is None:
            from ...config.providers import LLMProvider
            self._provider = LLMProvider()
        return self._provider

    def _get_chain(self):
        if self._chain is None:
            from langchain_core.prompts import ChatPromptTemplate

            prompt = ChatPromptTemplate.from_messages([
                ("system", SYSTEM_PROMPT),
                ("human", "{prompt}")
            ])
            self._chain = prompt | self._get_provider().get_chat_model()
        return self._chain

    async def complete(self, prompt: str, schema: dict) -> str:
        message = await self._get_chain().ainvoke({
            "prompt": prompt,
            "schema": json.dumps(schema, indent=2)
        })
        return _message_text(message)


class InferenceGateway:
    """
    Dashboard and transcript inference with size guard, retry and validation.

    Args:
        client: InferenceClient (optional, defaults to the LangChain client)
        config: GatewayConfig (optional, defaults to the environment settings)
        sleep: coroutine used between retries, asyncio.sleep by default
    """

    def __init__(
        self,
        client: Optional[InferenceClient] = None,
        config: Optional[GatewayConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self._client = client or LangChainInferenceClient()
        self.config = config or get_settings().gateway
        self._sleep = sleep

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def analyze_source(self, table_text: str) -> DashboardAnalysis:
        """Infer title, summary, KPIs, charts and deals from CSV text."""
        size = len(table_text)
        if size > self.config.max_input_chars:
            raise SizeLimitExceeded(
                f"Input CSV file is too large ({size / 1024 / 1024:.2f} MB). "
                f"The current limit is {self.config.max_input_chars:,} characters.",
                size=size,
                limit=self.config.max_input_chars
            )

        prompt = DASHBOARD_PROMPT.format(
            row_id_key=ROW_ID_KEY,
            formatting_rules=JSON_FORMATTING_RULES,
            table_text=table_text
        )
        return await self._run("dashboard", prompt, DashboardAnalysis)

    async def analyze_transcripts(
        self,
        transcript: str,
        current_deals: Iterable[Union[Deal, dict]]
    ) -> TranscriptAnalysis:
        """Analyze meetings and propose CRM updates and creations."""
        deals_json = json.dumps(
            [deal.to_dict() if isinstance(deal, Deal) else deal for deal in current_deals],
            indent=2
        )
        size = len(transcript) + len(deals_json)
        if size > self.config.max_input_chars:
            raise SizeLimitExceeded(
                f"Input transcript and deal data are too large ({size / 1024 / 1024:.2f} MB). "
                "Please use a smaller transcript or analyze a smaller dataset.",
                size=size,
                limit=self.config.max_input_chars
            )

        prompt = TRANSCRIPT_PROMPT.format(
            delimiter=TRANSCRIPT_DELIMITER.strip(),
            sentiments=", ".join(f"'{s.value}'" for s in Sentiment),
            fields=", ".join(f"'{f.wire_name}'" for f in DealField),
            formatting_rules=JSON_FORMATTING_RULES,
            transcript=transcript,
            deals_json=deals_json
        )
        return await self._run("transcripts", prompt, TranscriptAnalysis)

    # -------------------------------------------------------------------------
    # Call, retry, parse
    # -------------------------------------------------------------------------

    async def _run(self, operation: str, prompt: str, schema: Type[Payload]) -> Payload:
        try:
            text = await self._complete_with_retry(prompt, schema.model_json_schema(by_alias=True))
            return self.parse(text, schema)
        except InferenceError as e:
            logger.error("inference_failed", operation=operation, error=str(e), kind=type(e).__name__)
            raise

    async def _complete_with_retry(self, prompt: str, schema: dict) -> str:
        attempts = self.config.max_retries + 1
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self.config.initial_retry_delay,
                exp_base=self.config.retry_backoff
            ),
            retry=retry_if_exception_type(TransientServiceError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True
        )

        try:
            async for attempt in retrying:
                with attempt:
                    text = await self._complete_once(prompt, schema)
        except TransientServiceError as e:
            raise TransientServiceError(
                "The AI failed to generate a response after multiple attempts. This could be due "
                "to network issues or the input being too large or complex. Please try again later. "
                f"Details: {e}",
                attempts=attempts
            ) from e
        return text

    async def _complete_once(self, prompt: str, schema: dict) -> str:
        try:
            text = await self._client.complete(prompt, schema)
        except InferenceError:
            raise
        except Exception as e:
            message = str(e) or type(e).__name__
            if _TRANSIENT_MARKERS.search(message):
                raise TransientServiceError(message) from e
            raise InferenceServiceError(f"Model API error: {message}") from e

        if not text or not text.strip():
            raise TransientServiceError(EMPTY_RESPONSE_MESSAGE)
        return text

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "inference_retry",
            attempt=retry_state.attempt_number,
            max_retries=self.config.max_retries,
            delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None
        )

    @staticmethod
    def parse(text: str, schema: Type[Payload]) -> Payload:
        """Parse and validate raw model text against a payload schema."""
        try:
            data = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise MalformedResponse(
                f"The AI returned malformed data that could not be parsed. Details: {e}"
            ) from e

        if not isinstance(data, dict):
            raise MalformedResponse(
                f"The AI returned a JSON {type(data).__name__} where an object was expected."
            )

        missing = [
            name for name in schema.REQUIRED_FIELDS
            if data.get(name) is None and data.get(to_snake(name)) is None
        ]
        if missing:
            raise IncompleteResponse(
                f"The AI response is missing required fields: {', '.join(missing)}.",
                missing=missing
            )

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(
                f"The AI response does not match the expected structure "
                f"({e.error_count()} error(s)). Details: {e}"
            ) from e
