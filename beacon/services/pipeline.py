"""
Decision Pipeline

Per request, in strict order (first match wins):
1) Reject requests without a URL or API key
2) Resolve the user's rule snapshot; unknown keys are rejected
3) Normalize the page's domain once
4) System policy: infra, search engines, video browsing
5) User allow list
6) User block list
7) AI judge

Every verdict except the infra allow is written to the audit log exactly
once. Failures after step 2 are recorded as a BLOCK with reason
``server-error`` and surface as a generic internal error.
"""

import logging

from ..core.domains import extract_hostname, matches_any, registrable_domain
from ..core.exceptions import (
    DecisionPipelineError,
    InvalidApiKeyError,
    MissingCredentialsError,
)
from ..core.system_policy import evaluate_system_policy
from ..core.verdicts import AuditEntry, AuditReason, Decision, RuleData, Verdict
from ..schemas.check import PageDescriptor
from ..utils.logging import mask_key
from .audit import AuditLogger
from .judge import AIJudge
from .rule_store import RuleStoreGateway

logger = logging.getLogger(__name__)


class DecisionPipeline:
    """Orchestrates the cheap deterministic filters ahead of the AI judge."""

    def __init__(
        self,
        rule_store: RuleStoreGateway,
        judge: AIJudge,
        audit: AuditLogger,
    ) -> None:
        self._rule_store = rule_store
        self._judge = judge
        self._audit = audit

    async def decide(self, page: PageDescriptor, api_key: str | None) -> Decision:
        """Return the verdict for one page."""
        verdict = await self.evaluate(page, api_key)
        return verdict.decision

    async def evaluate(self, page: PageDescriptor, api_key: str | None) -> Verdict:
        """Run the pipeline and return the verdict together with its reason.

        Raises:
            MissingCredentialsError: url or api key missing
            InvalidApiKeyError: api key does not resolve to a rule record
            DecisionPipelineError: any failure while deciding
        """
        url = (page.url or "").strip()
        if not url or not api_key:
            raise MissingCredentialsError()

        rule = await self._rule_store.fetch_rule(api_key)
        if rule is None:
            raise InvalidApiKeyError()

        domain = None
        try:
            hostname = extract_hostname(url)
            domain = registrable_domain(hostname)
            if domain is None:
                logger.warning("No domain for URL %r; skipping domain rules", url)
            verdict = await self._run_rules(page, url, hostname, domain, rule)
        except Exception as e:
            logger.exception(
                "Error during pre-filtering or AI check for %s (key %s): %s",
                url,
                mask_key(api_key),
                e,
            )
            await self._audit.record(
                AuditEntry(
                    user_id=rule.user_id,
                    url=url,
                    domain=domain,
                    decision=Decision.BLOCK,
                    reason=AuditReason.SERVER_ERROR,
                    page_title=page.title,
                )
            )
            raise DecisionPipelineError(e) from e

        await self._audit.record(
            AuditEntry(
                user_id=rule.user_id,
                url=url,
                domain=domain,
                decision=verdict.decision,
                reason=verdict.reason,
                page_title=verdict.page_title,
            )
        )
        return verdict

    async def _run_rules(
        self,
        page: PageDescriptor,
        url: str,
        hostname: str | None,
        domain: str | None,
        rule: RuleData,
    ) -> Verdict:
        system_verdict = evaluate_system_policy(
            url, hostname, domain, title=page.title, search_query=page.search_query
        )
        if system_verdict is not None:
            return system_verdict

        if matches_any(domain, rule.allow_list):
            logger.info("URL domain (%s) matches Allow list. ALLOWING.", domain)
            return Verdict(Decision.ALLOW, AuditReason.ALLOW_LIST, page.title)

        if matches_any(domain, rule.block_list):
            logger.info("URL domain (%s) matches Block list. BLOCKING.", domain)
            return Verdict(Decision.BLOCK, AuditReason.BLOCK_LIST, page.title)

        logger.info("URL not in pre-filter lists. Proceeding to AI check.")
        decision = await self._judge.judge(page, rule)
        return Verdict(decision, AuditReason.AI_DECISION, page.title)
