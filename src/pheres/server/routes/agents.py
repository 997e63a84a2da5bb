"""
Agent routes: /api/agents
"""

from typing import Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from pheres.core.errors import ParseError, PheresError
from pheres.core.store import AgentRecord
from pheres.core.terms import format_term
from pheres.server.deps import get_agent_store


router = APIRouter(prefix="/api/agents", tags=["agents"])


class CreateAgentRequest(BaseModel):
    name: str
    source: str
    lenient: bool = False
    run: bool = True


class EventRequest(BaseModel):
    kind: Literal["achieve", "add", "remove"] = "achieve"
    literal: str
    max_cycles: int | None = None


class QueryRequest(BaseModel):
    query: str


def _get_record(agent_id: str) -> AgentRecord:
    record = get_agent_store().get(agent_id)
    if not record:
        raise HTTPException(status_code=404, detail="Agent not found")
    return record


@router.get("")
def list_agents():
    """List all agents."""
    return {"agents": [r.summary() for r in get_agent_store().list_all()]}


@router.post("")
def create_agent(req: CreateAgentRequest):
    """Create an agent from source; runs its initial goals unless run is false."""
    try:
        record = get_agent_store().create(req.name, req.source, lenient=req.lenient)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = {"handled": 0, "pending": len(record.agent.events), "output": []}
    if req.run:
        with record.lock:
            result = record.run()
    return {**record.summary(), "errors": [str(e) for e in record.agent.program.errors], **result}


@router.get("/{agent_id}")
def get_agent(agent_id: str):
    """Get an agent's beliefs, plans and output so far."""
    record = _get_record(agent_id)
    with record.lock:
        return record.to_dict()


@router.delete("/{agent_id}")
def delete_agent(agent_id: str):
    """Delete an agent."""
    if not get_agent_store().delete(agent_id):
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"deleted": agent_id}


@router.post("/{agent_id}/events")
def post_event(agent_id: str, req: EventRequest):
    """Post a goal or belief change and run the agent until it settles."""
    record = _get_record(agent_id)
    with record.lock:
        agent = record.agent
        try:
            if req.kind == "achieve":
                agent.achieve(req.literal)
            elif req.kind == "add":
                agent.add_belief(req.literal)
            else:
                agent.remove_belief(req.literal)
        except (PheresError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"id": agent_id, **record.run(req.max_cycles)}


@router.post("/{agent_id}/query")
def query_agent(agent_id: str, req: QueryRequest):
    """Solve a query against the agent's current beliefs."""
    record = _get_record(agent_id)
    with record.lock:
        try:
            solutions = record.agent.query(req.query)
        except PheresError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return {
        "query": req.query,
        "solutions": [{name: format_term(value) for name, value in s.items()} for s in solutions],
    }
