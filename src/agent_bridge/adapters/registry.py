"""Lookup table from agent name to a configured adapter."""

from agent_bridge.adapters.base import SessionAdapter
from agent_bridge.adapters.claude import ClaudeAdapter
from agent_bridge.adapters.codex import CodexAdapter
from agent_bridge.adapters.cursor import CursorAdapter
from agent_bridge.adapters.gemini import GeminiAdapter
from agent_bridge.config import BridgeConfig
from agent_bridge.errors import UnsupportedAgentError
from agent_bridge.models import Agent


def parse_agent(name: Agent | str) -> Agent:
    """Coerce a user-supplied agent name (any case) to an Agent.

    Raises:
        UnsupportedAgentError: If the name is not a supported agent.
    """
    if isinstance(name, Agent):
        return name
    try:
        return Agent(str(name).strip().lower())
    except ValueError:
        raise UnsupportedAgentError(f"Unsupported agent: {name}") from None


class AdapterRegistry:
    """One adapter per agent, each bound to the directories in ``config``."""

    def __init__(self, config: BridgeConfig | None = None) -> None:
        config = config or BridgeConfig()
        self._adapters: dict[Agent, SessionAdapter] = {
            Agent.CODEX: CodexAdapter(config.codex_base),
            Agent.GEMINI: GeminiAdapter(config.gemini_base),
            Agent.CLAUDE: ClaudeAdapter(config.claude_base),
            Agent.CURSOR: CursorAdapter(config.cursor_base),
        }

    def get(self, agent: Agent | str) -> SessionAdapter:
        """Return the adapter for ``agent``.

        Raises:
            UnsupportedAgentError: If the agent is unknown.
        """
        return self._adapters[parse_agent(agent)]

    def agents(self) -> list[str]:
        return [agent.value for agent in self._adapters]
