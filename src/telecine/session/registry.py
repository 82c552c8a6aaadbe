"""
Session Registry
================

The set of connected sessions, keyed by connection identity.

Mutated only from the event loop: on accept, on disconnect and on
eviction by the broadcaster.
"""

import logging
from typing import Dict, Iterator, List

from telecine.session.client import ClientSession


logger = logging.getLogger(__name__)


class SessionRegistry:
    """Connected sessions, in connection order."""
    
    def __init__(self) -> None:
        self._sessions: Dict[int, ClientSession] = {}
    
    def __len__(self) -> int:
        return len(self._sessions)
    
    def __contains__(self, session: ClientSession) -> bool:
        return id(session) in self._sessions
    
    def __iter__(self) -> Iterator[ClientSession]:
        return iter(self.snapshot())
    
    def add(self, session: ClientSession) -> None:
        self._sessions[id(session)] = session
    
    def remove(self, session: ClientSession) -> bool:
        """
        Remove a session if present.
        
        Returns:
            True if the session was registered.
        """
        return self._sessions.pop(id(session), None) is not None
    
    def snapshot(self) -> List[ClientSession]:
        """Copy of the current sessions, safe to iterate while mutating."""
        return list(self._sessions.values())
