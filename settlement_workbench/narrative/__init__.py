"""Audit narrative: providers, fallback text and the mini-format parser."""

from settlement_workbench.narrative.fallback import build_fallback_narrative, format_amount
from settlement_workbench.narrative.markup import NarrativeBlock, TextSpan, parse_narrative
from settlement_workbench.narrative.models import (
    NarrativeRequest,
    NarrativeResult,
    NarrativeSource,
)
from settlement_workbench.narrative.policy import resolve_narrative
from settlement_workbench.narrative.provider import (
    AnthropicNarrativeProvider,
    FallbackNarrativeProvider,
    NarrativeProvider,
    NarrativeProviderError,
)

__all__ = [
    "AnthropicNarrativeProvider",
    "FallbackNarrativeProvider",
    "NarrativeBlock",
    "NarrativeProvider",
    "NarrativeProviderError",
    "NarrativeRequest",
    "NarrativeResult",
    "NarrativeSource",
    "TextSpan",
    "build_fallback_narrative",
    "format_amount",
    "parse_narrative",
    "resolve_narrative",
]
