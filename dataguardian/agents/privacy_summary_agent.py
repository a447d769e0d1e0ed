"""Privacy summary agent.

Turns a site URL and its tracker hostnames into a raw JSON privacy
summary.  Parsing, validation and fallback live in the summarizer
pipeline so this agent stays a thin text-completion wrapper.
"""

from __future__ import annotations

from dataguardian.agents import base, config
from dataguardian.agents.prompts import privacy_summary


class PrivacySummaryAgent(base.BaseAgent):
    """Text agent producing the five-field privacy summary JSON."""

    agent_name = config.AGENT_PRIVACY_SUMMARY
    instructions = privacy_summary.INSTRUCTIONS
    max_tokens = 1500
    max_retries = 3

    async def complete(self, prompt: str) -> str:
        """Send *prompt* and return the raw response text."""
        return await self._complete(prompt)
