"""
Chat Model Factory

Builds the LangChain chat model selected by LLMConfig. Hosted providers are
switched to JSON output where their API offers it; the prompt carries the
schema either way.
"""

from langchain_core.language_models.chat_models import BaseChatModel

from ..core.log import get_logger
from ..errors import ConfigError
from .settings import LLMConfig, LLMProviderType, get_settings

logger = get_logger(__name__)


DEFAULT_MODEL_NAMES = {
    LLMProviderType.GOOGLE_GENAI: "gemini-2.5-flash",
    LLMProviderType.OPENAI: "gpt-4o-mini",
    LLMProviderType.ANTHROPIC: "claude-3-5-sonnet-20241022",
    LLMProviderType.OLLAMA: "llama3.2",
}


class LLMProvider:
    """
    Lazily built chat model for the configured provider.

    Raises ConfigError when a hosted provider has no API key.
    """

    def __init__(self, config: LLMConfig = None):
        self.config = config if config is not None else get_settings().llm
        self._chat_model = None

    @property
    def model_name(self) -> str:
        return self.config.model_name or DEFAULT_MODEL_NAMES[self.config.provider]

    def get_chat_model(self) -> BaseChatModel:
        if self._chat_model is None:
            build = {
                LLMProviderType.GOOGLE_GENAI: self._gemini,
                LLMProviderType.OPENAI: self._openai,
                LLMProviderType.ANTHROPIC: self._anthropic,
                LLMProviderType.OLLAMA: self._ollama,
            }[self.config.provider]
            self._chat_model = build()
            logger.info(
                "chat_model_ready",
                provider=self.config.provider.value,
                model=self.model_name
            )
        return self._chat_model

    def _require_key(self) -> str:
        key = self.config.api_key()
        if not key:
            raise ConfigError(
                f"No API key configured for the {self.config.provider.value} provider"
            )
        return key

    def _gemini(self) -> BaseChatModel:
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=self.model_name,
            google_api_key=self._require_key(),
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_tokens,
            timeout=self.config.timeout,
            response_mime_type="application/json"
        )

    def _openai(self) -> BaseChatModel:
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=self.model_name,
            api_key=self._require_key(),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=self.config.timeout,
            model_kwargs={"response_format": {"type": "json_object"}}
        )

    def _anthropic(self) -> BaseChatModel:
        # No JSON switch; relies on the system prompt
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=self.model_name,
            api_key=self._require_key(),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=self.config.timeout
        )

    def _ollama(self) -> BaseChatModel:
        from langchain_community.chat_models import ChatOllama

        return ChatOllama(
            model=self.model_name,
            base_url=self.config.ollama_base_url,
            temperature=self.config.temperature,
            num_predict=self.config.max_tokens,
            format="json"
        )
