"""
agent/ — AxonerAI Agent Core

Public API:
    from agent import Agent, Session, FileSessionStore

Component overview:
    Session             Ordered message history for one conversation
    SessionStore        exists / load / save contract for snapshots
    FileSessionStore    JSON snapshot per session under a base directory
    Agent               Control loop: completion → tools → completion
"""

from agent.agent import Agent, TurnOutcome, TurnResult
from agent.session import Session
from agent.session_store import FileSessionStore, InMemorySessionStore, SessionStore

__all__ = [
    "Agent",
    "TurnOutcome",
    "TurnResult",
    "Session",
    "SessionStore",
    "FileSessionStore",
    "InMemorySessionStore",
]
