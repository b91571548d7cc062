"""Audit narrative providers.

Two implementations of the same capability:
- AnthropicNarrativeProvider asks Claude for an audit narrative.
- FallbackNarrativeProvider formats the standard narrative locally.

Choosing between them is the caller's job (see
settlement_workbench.narrative.policy); neither provider retries or falls
back on its own.

Example:
    >>> provider = AnthropicNarrativeProvider()
    >>> text = await provider.generate(request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from settlement_workbench.core.config import settings
from settlement_workbench.core.logging import get_logger
from settlement_workbench.narrative.fallback import build_fallback_narrative
from settlement_workbench.narrative.models import NarrativeRequest
from settlement_workbench.narrative.prompts import build_narrative_prompt

if TYPE_CHECKING:
    from anthropic import AsyncAnthropic

logger = get_logger(__name__)


class NarrativeProviderError(Exception):
    """Raised when a provider returns no usable narrative."""


@runtime_checkable
class NarrativeProvider(Protocol):
    """Anything that can write an audit narrative for a settlement."""

    async def generate(self, request: NarrativeRequest) -> str:
        """Return narrative text for the request or raise on failure."""
        ...


class AnthropicNarrativeProvider:
    """Narrative provider backed by the Anthropic Messages API."""

    def __init__(
        self,
        client: "AsyncAnthropic | None" = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            client: Optional Anthropic client for dependency injection in tests.
                Created lazily from settings when omitted.
            model: Model override. Defaults to settings.narrative_model.
            max_tokens: Completion budget. Defaults to settings.narrative_max_tokens.
        """
        self._client = client
        self.model = model or settings.narrative_model
        self.max_tokens = max_tokens or settings.narrative_max_tokens

    def _get_client(self) -> "AsyncAnthropic":
        if self._client is None:
            # Import here so the SDK is only loaded when a real call is made.
            from anthropic import AsyncAnthropic as AnthropicClient

            if settings.anthropic_api_key:
                self._client = AnthropicClient(api_key=settings.anthropic_api_key)
            else:
                self._client = AnthropicClient()
        return self._client

    async def generate(self, request: NarrativeRequest) -> str:
        """Ask Claude for an audit narrative.

        Args:
            request: Settlement data for the narrative.

        Returns:
            Narrative text in the heading/bold mini-format.

        Raises:
            NarrativeProviderError: If the response contains no text.
            anthropic.APIError: If the API request fails.
        """
        client = self._get_client()
        message = await client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": build_narrative_prompt(request),
                }
            ],
        )

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise NarrativeProviderError(
                f"Model {self.model} returned no narrative text "
                f"(stop_reason={getattr(message, 'stop_reason', None)})"
            )

        logger.info(
            "narrative_generated",
            model=self.model,
            characters=len(text),
        )
        return text


class FallbackNarrativeProvider:
    """Local provider that formats the standard narrative. Never fails."""

    async def generate(self, request: NarrativeRequest) -> str:
        """Return the deterministic fallback narrative."""
        return build_fallback_narrative(request)
