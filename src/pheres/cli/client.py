"""
HTTP client for the pheres API.
"""

import os

import httpx

BASE_URL = os.environ.get("PHERES_API_URL", "http://localhost:8000/api")


# === Agents ===

def create_agent(name: str, source: str, lenient: bool = False) -> dict:
    payload = {"name": name, "source": source, "lenient": lenient}
    r = httpx.post(f"{BASE_URL}/agents", json=payload, timeout=60)
    r.raise_for_status()
    return r.json()


def list_agents() -> list[dict]:
    r = httpx.get(f"{BASE_URL}/agents")
    r.raise_for_status()
    return r.json()["agents"]


def get_agent(agent_id: str) -> dict:
    r = httpx.get(f"{BASE_URL}/agents/{agent_id}")
    r.raise_for_status()
    return r.json()


def delete_agent(agent_id: str) -> dict:
    r = httpx.delete(f"{BASE_URL}/agents/{agent_id}")
    r.raise_for_status()
    return r.json()


# === Events and queries ===

def post_event(agent_id: str, kind: str, literal: str, max_cycles: int | None = None) -> dict:
    payload = {"kind": kind, "literal": literal, "max_cycles": max_cycles}
    r = httpx.post(f"{BASE_URL}/agents/{agent_id}/events", json=payload, timeout=120)
    r.raise_for_status()
    return r.json()


def query_agent(agent_id: str, query: str) -> dict:
    r = httpx.post(f"{BASE_URL}/agents/{agent_id}/query", json={"query": query}, timeout=60)
    r.raise_for_status()
    return r.json()
