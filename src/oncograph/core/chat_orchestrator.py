"""Knowledge-grounded chat with Claude.

One turn:
1. Validate the API key (no network call when missing/malformed)
2. Extract the query's subgraph and format it as context
3. Send one system + one user message to the Anthropic Messages API
4. Pair the answer with the subgraph, or classify the failure into a
   user-facing message (no subgraph attached)

No streaming, no retries, no conversation history is resent.
"""

import logging
from pathlib import Path
from typing import Any, Literal, Optional, Tuple

import anthropic
from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import DEFAULT_PROMPTS_DIR, Settings
from ..utils.validators import ValidationError, validate_api_key
from .prompt_formatter import format_knowledge_context, load_context_header
from .subgraph_extractor import Subgraph, SubgraphExtractor

logger = logging.getLogger(__name__)

ErrorKind = Literal["configuration", "authentication", "rate_limit", "server", "network", "generic"]

EMPTY_RESPONSE_TEXT = "Sorry, I couldn't generate a response."


class ChatResponse(BaseModel):
    """Answer for one chat turn."""

    text: str = Field(description="Answer or user-facing error message")
    subgraph: Optional[Subgraph] = Field(default=None, description="Retrieved subgraph (None on error)")
    error_kind: Optional[ErrorKind] = Field(default=None, description="Failure category, if any")
    input_tokens: int = Field(default=0, description="Prompt tokens reported by the API")
    output_tokens: int = Field(default=0, description="Completion tokens reported by the API")

    @property
    def is_error(self) -> bool:
        return self.error_kind is not None


def classify_error(error: Exception) -> Tuple[ErrorKind, str]:
    """Map an exception from a chat turn to a user-facing message.

    Args:
        error: Exception raised during validation or the API call

    Returns:
        Tuple of (error kind, message)
    """
    if isinstance(error, ValidationError):
        return "configuration", str(error)
    if isinstance(error, anthropic.AuthenticationError):
        return (
            "authentication",
            "Authentication failed. Please check that your Anthropic API key is valid and has sufficient credits.",
        )
    if isinstance(error, anthropic.RateLimitError):
        return "rate_limit", "Rate limit exceeded. Please wait a moment and try again."
    if isinstance(error, anthropic.APIStatusError) and error.status_code >= 500:
        return "server", "Anthropic server error. Please try again later."
    if isinstance(error, anthropic.APIConnectionError):
        return "network", "Network error. Please check your internet connection."
    message = str(error) or error.__class__.__name__
    return "generic", f"Error: {message}"


class ChatOrchestrator:
    """Answer oncology questions with knowledge graph context.

    Example:
        >>> orchestrator = ChatOrchestrator.from_settings(settings, extractor)
        >>> response = orchestrator.answer("What is EGFR?")
        >>> print(response.text)
        >>> render_subgraph(response.subgraph)
    """

    def __init__(
        self,
        extractor: SubgraphExtractor,
        api_key: Optional[str],
        model: str = "claude-haiku-4-5",
        max_tokens: int = 1000,
        temperature: float = 0.3,
        api_key_prefix: str = "sk-ant-",
        prompts_dir: Optional[Path] = None,
        client: Optional[Any] = None,
    ):
        """Initialize orchestrator.

        Args:
            extractor: Subgraph extractor for retrieval
            api_key: Anthropic API key (validated on every turn)
            model: Claude model to use
            max_tokens: Max tokens per response
            temperature: Sampling temperature
            api_key_prefix: Literal prefix a valid key starts with
            prompts_dir: Directory with system_prompt.txt and context_header.txt
            client: Pre-built Anthropic client (tests inject a fake); created
                lazily from api_key otherwise
        """
        self.extractor = extractor
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.api_key_prefix = api_key_prefix
        self.prompts_dir = prompts_dir or DEFAULT_PROMPTS_DIR
        self._client = client

        self.context_header = load_context_header(self.prompts_dir)
        self.system_prompt_template = self._load_system_prompt_template()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        extractor: SubgraphExtractor,
        client: Optional[Any] = None,
    ) -> "ChatOrchestrator":
        return cls(
            extractor=extractor,
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_tokens=settings.claude_max_tokens,
            temperature=settings.claude_temperature,
            api_key_prefix=settings.api_key_prefix,
            prompts_dir=settings.prompts_dir,
            client=client,
        )

    def answer(self, query: str) -> ChatResponse:
        """Run one chat turn. Never raises.

        Args:
            query: User question

        Returns:
            ChatResponse with answer and subgraph, or an error message
        """
        try:
            api_key = validate_api_key(self.api_key, self.api_key_prefix)

            subgraph = self.extractor.query_knowledge_graph(query)
            knowledge_context = format_knowledge_context(subgraph.nodes, subgraph.edges, self.context_header)
            system_prompt = self.build_system_prompt(knowledge_context)

            response = self._get_client(api_key).messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": query}],
            )

            text = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            ).strip()

            input_tokens, output_tokens = 0, 0
            usage = getattr(response, "usage", None)
            if usage is not None:
                input_tokens = usage.input_tokens
                output_tokens = usage.output_tokens

            logger.info(
                f"Answered query with {len(subgraph.nodes)} context nodes | "
                f"usage: {input_tokens:,} input + {output_tokens:,} output tokens"
            )
            return ChatResponse(
                text=text or EMPTY_RESPONSE_TEXT,
                subgraph=subgraph,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        except Exception as e:
            error_kind, message = classify_error(e)
            logger.error(f"Chat turn failed ({error_kind}): {e}")
            return ChatResponse(text=message, error_kind=error_kind)

    def build_system_prompt(self, knowledge_context: str) -> str:
        """Instruction preamble with the formatted knowledge context appended."""
        return self.system_prompt_template.format(knowledge_context=knowledge_context)

    def _get_client(self, api_key: str) -> Any:
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=api_key)
            logger.info("Anthropic client initialized successfully")
        return self._client

    def _load_system_prompt_template(self) -> str:
        path = self.prompts_dir / "system_prompt.txt"
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.error(f"Prompt file not found: {path}")
            raise FileNotFoundError(
                f"System prompt file not found at {path}. "
                f"Expected location: src/oncograph/config/prompts/system_prompt.txt"
            )
