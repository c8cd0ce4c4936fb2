"""
AI Judge

Last stage of the decision pipeline: asks a language model whether a page
fits the user's policy.

The model's answer is treated as untrusted free text. ``parse_verdict``
classifies it and falls back to BLOCK when it mentions neither verdict;
backend failures and timeouts also resolve to BLOCK.
"""

import logging

from ..core.categories import CATEGORY_TABLE, selected_categories
from ..core.config import Settings
from ..core.exceptions import CompletionError
from ..core.verdicts import Decision, RuleData
from ..schemas.check import PageDescriptor
from .completion import CompletionClient

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
FALLBACK_DECISION = Decision.BLOCK

PRIORITY_INSTRUCTIONS = """**DECISION RULES (in priority order):**
1. The user's own policy text above is the highest authority. If it explicitly allows something, ALLOW it even when it falls into a blocked category.
2. If the page matches any "Explicitly Blocked Category" and the user's policy does not explicitly exempt it, BLOCK it.
3. Otherwise use the user's policy text for overall guidance and nuance.
4. Apply category definitions strictly as written; do not stretch a category to cover related content.
5. Respond with exactly one word: ALLOW or BLOCK. Be decisive."""


def _field(value: str | None) -> str:
    value = (value or "").strip()
    return value if value else NOT_AVAILABLE


def query_matches_title(search_query: str | None, title: str | None) -> bool:
    """True if the page title and the user's search contain one another."""
    query = (search_query or "").strip().lower()
    page_title = (title or "").strip().lower()
    if not query or not page_title:
        return False
    return query in page_title or page_title in query


def build_prompt(page: PageDescriptor, rule: RuleData, body_chars: int = 1500) -> str:
    """Render the judge prompt for one page and one user policy."""
    sections = [f"**User's Policy:**\n{rule.prompt.strip() or 'No prompt provided.'}"]

    categories = selected_categories(rule.blocked_categories)
    if categories:
        lines = []
        for key in categories:
            info = CATEGORY_TABLE[key]
            line = f"- {info.label}"
            if info.scope:
                line += f" (strictly: {info.scope})"
            lines.append(line)
        sections.append("**Explicitly Blocked Categories:**\n" + "\n".join(lines))

    body = (page.body_text or "")[:body_chars]
    sections.append(
        "Analyze the webpage based on the following information:\n"
        f'- URL: "{_field(page.url)}"\n'
        f'- Title: "{_field(page.title)}"\n'
        f'- H1 Header: "{_field(page.h1)}"\n'
        f'- Meta Description: "{_field(page.description)}"\n'
        f'- Meta Keywords: "{_field(page.keywords)}"\n'
        f'- Body Text Snippet: "{_field(body)}"\n'
        f'- Search Query (if any): "{_field(page.search_query)}"'
    )
    sections.append(PRIORITY_INSTRUCTIONS)
    return "\n\n".join(sections)


def parse_verdict(text: str | None) -> Decision:
    """Classify a free-text model answer as ALLOW or BLOCK.

    BLOCK wins when both words appear; anything unrecognizable is BLOCK.
    """
    answer = (text or "").strip().upper()
    if "BLOCK" in answer:
        return Decision.BLOCK
    if "ALLOW" in answer:
        return Decision.ALLOW
    logger.warning("AI gave unclear answer: %r. Defaulting to %s.", text, FALLBACK_DECISION.value)
    return FALLBACK_DECISION


class AIJudge:
    """Turns a page description plus a user policy into a verdict."""

    def __init__(self, client: CompletionClient, settings: Settings):
        self.client = client
        self.temperature = settings.AI_TEMPERATURE
        self.body_chars = settings.AI_BODY_SNIPPET_CHARS

    async def judge(self, page: PageDescriptor, rule: RuleData) -> Decision:
        if query_matches_title(page.search_query, page.title):
            logger.info("AI skipped: title matches search query for %s", page.url)
            return Decision.ALLOW

        logger.info("AI Check: Title='%s', URL='%s'", page.title or "(empty)", page.url)
        prompt = build_prompt(page, rule, self.body_chars)
        try:
            answer = await self.client.complete(prompt, temperature=self.temperature)
        except CompletionError as e:
            logger.error("Error contacting AI: %s", e.detail)
            return FALLBACK_DECISION
        except Exception as e:
            logger.exception("Unexpected AI backend failure: %s", e)
            return FALLBACK_DECISION

        decision = parse_verdict(answer)
        logger.info("AI decision for %s is: %s", page.url, decision.value)
        return decision
