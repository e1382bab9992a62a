"""Allow ``python -m agent_bridge``."""

from agent_bridge.cli import app

app()
