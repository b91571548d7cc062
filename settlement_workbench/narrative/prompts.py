"""Prompt for the settlement audit narrative.

Kept apart from the provider so the wording can be tuned and tested
without touching transport code.

The prompt asks for:
- Compliance, funding, tax and overall-risk sections
- The heading and bold markers the preview renderer understands
- Figures quoted from the payload, never recomputed
"""

from __future__ import annotations

import orjson

from settlement_workbench.narrative.models import NarrativeRequest

AUDIT_NARRATIVE_PROMPT = """You are a financial auditor reviewing a subcontract settlement
for a design and construction group. Write an audit conclusion for the settlement below.

**FORMAT:**
- Start with one title line beginning with "# ".
- Use "## " for each section heading.
- Wrap key figures and conclusions in **double asterisks**.
- Separate paragraphs with a blank line. No tables, no code blocks.

**SECTIONS (in order):**
1. Financial compliance: are the deductions reasonable for the cooperation mode?
2. Funding and budget: compare the settlement amount with the project's available funds
   and the subcontract's unsettled amount.
3. Tax and invoicing: comment on the simulated input-tax credit and what invoices the
   vendor should return.
4. Overall assessment: give a risk level (Low / Medium / High) and a recommendation.

**RULES:**
- Quote amounts exactly as given. Do not recompute them.
- Keep the whole narrative under 400 words.

**SETTLEMENT DATA (JSON):**
{payload}
"""


def build_narrative_prompt(request: NarrativeRequest) -> str:
    """Render the audit prompt with the request serialized as JSON.

    Args:
        request: Settlement data for the narrative.

    Returns:
        Prompt text ready to send as a user message.
    """
    payload = orjson.dumps(
        request.model_dump(mode="json"),
        option=orjson.OPT_INDENT_2,
    ).decode("utf-8")
    return AUDIT_NARRATIVE_PROMPT.format(payload=payload)
