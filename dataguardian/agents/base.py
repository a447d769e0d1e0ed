"""Base agent for LLM-backed text completion.

Owns the chat client and builds a ``ChatAgent`` per call with
timing and retry middleware attached.  Domain agents subclass
``BaseAgent`` and supply their instructions.
"""

from __future__ import annotations

import agent_framework

from dataguardian.agents import llm_client
from dataguardian.agents import middleware as middleware_mod
from dataguardian.utils import logger

log = logger.create_logger("BaseAgent")


class BaseAgent:
    """Base class for text-completion agents.

    Attributes:
        agent_name: Identifier for logging and middleware.
        instructions: System prompt sent to the LLM.
        max_tokens: Default maximum response tokens.
        max_retries: Retry attempts for transient failures.
    """

    agent_name: str = "BaseAgent"
    instructions: str = ""
    max_tokens: int = 1500
    max_retries: int = 3

    def __init__(self) -> None:
        self._chat_client: agent_framework.ChatClientProtocol | None = None
        self._timing = middleware_mod.TimingChatMiddleware(self.agent_name)
        self._retry = middleware_mod.RetryChatMiddleware(self.agent_name, max_retries=self.max_retries)

    def initialise(self) -> bool:
        """Create the underlying chat client.

        Returns:
            ``True`` when an LLM backend is configured.
        """
        self._chat_client = llm_client.get_chat_client(agent_name=self.agent_name)
        return self._chat_client is not None

    @property
    def is_configured(self) -> bool:
        """Whether the LLM client is ready."""
        return self._chat_client is not None

    def _build_agent(self, instructions: str | None = None, max_tokens: int | None = None) -> agent_framework.ChatAgent:
        """Build a ``ChatAgent`` for one call (use with ``async with``)."""
        if self._chat_client is None:
            raise ValueError(f"{self.agent_name}: chat client not initialised. Call initialise() first.")

        return agent_framework.ChatAgent(
            chat_client=self._chat_client,
            instructions=instructions or self.instructions,
            name=self.agent_name,
            description=f"Chat agent for {self.agent_name}",
            tools=[],
            default_options=agent_framework.ChatOptions(max_tokens=max_tokens or self.max_tokens),
            middleware=[self._retry, self._timing],
        )

    async def _complete(
        self,
        user_prompt: str,
        *,
        instructions: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Run a text completion and return the response text."""
        log.debug(
            f"{self.agent_name}: text completion",
            {"promptChars": len(user_prompt), "maxTokens": max_tokens or self.max_tokens},
        )
        message = agent_framework.ChatMessage(role=agent_framework.Role.USER, text=user_prompt)
        async with self._build_agent(instructions, max_tokens) as agent:
            response = await agent.run(message)
        text = response.text or ""
        log.debug(f"{self.agent_name}: response received", {"responseChars": len(text)})
        return text
