"""
AgentStore - live agents held in memory, addressed by id.
"""

import io
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pheres.core.agent import Agent
from pheres.core.config import RuntimeConfig
from pheres.core.parser import parse_program

logger = logging.getLogger(__name__)


@dataclass
class AgentRecord:
    id: str
    agent: Agent
    source: str
    created_at: str
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def run(self, max_cycles: int | None = None) -> dict:
        """Run the agent and report what it printed while doing so."""
        start = len(self.agent.transcript)
        handled = self.agent.run(max_cycles)
        return {
            "handled": handled,
            "pending": len(self.agent.events),
            "output": self.agent.transcript[start:],
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at,
            **self.agent.to_dict(),
            "errors": [str(e) for e in self.agent.program.errors],
            "transcript": list(self.agent.transcript),
        }

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.agent.name,
            "created_at": self.created_at,
            "belief_count": len(self.agent.beliefs),
            "plan_count": len(self.agent.plans),
        }


class AgentStore:
    """Agents keyed by id. Each record carries its own lock for callers running it."""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or RuntimeConfig()
        self._records: dict[str, AgentRecord] = {}
        self._lock = threading.Lock()

    def create(self, name: str, source: str, lenient: bool = False) -> AgentRecord:
        """Parse source into a new agent. Raises ParseError unless lenient."""
        program = parse_program(source, strict=not lenient)
        agent = Agent(program, name=name, config=self.config, out=io.StringIO())

        record = AgentRecord(
            id=uuid.uuid4().hex[:12],
            agent=agent,
            source=source,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            self._records[record.id] = record
        logger.info("created agent %s (%s)", record.id, name)
        return record

    def get(self, agent_id: str) -> AgentRecord | None:
        with self._lock:
            return self._records.get(agent_id)

    def list_all(self) -> list[AgentRecord]:
        with self._lock:
            return list(self._records.values())

    def delete(self, agent_id: str) -> bool:
        with self._lock:
            return self._records.pop(agent_id, None) is not None
