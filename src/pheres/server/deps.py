"""
Shared dependencies for routes.
"""

from pheres.core.config import RuntimeConfig
from pheres.core.store import AgentStore

_store: AgentStore | None = None


def get_agent_store() -> AgentStore:
    global _store
    if _store is None:
        _store = AgentStore(RuntimeConfig.from_env())
    return _store


def reset_agent_store():
    global _store
    _store = None
