import logging
from asyncio import Lock
from datetime import datetime, timedelta
from typing import Dict, Optional
from uuid import UUID

from geoduel.models.schema_models import MatchSchema


class MatchStore:
    """In-process table of live duels, swept by age.

    Every access to the table goes through ``self.lock``. Each match also gets
    its own lock so one guess resolution runs at a time per match.
    """

    def __init__(self, expiry_minutes: int):
        self.matches: Dict[UUID, MatchSchema] = {}
        self.match_locks: Dict[UUID, Lock] = {}
        self.lock = Lock()
        self.expiry = timedelta(minutes=expiry_minutes)

    async def put(self, match: MatchSchema) -> None:
        """Store a match under its id

        Args:
            match (MatchSchema): Newly created match
        """
        async with self.lock:
            self.matches[match.id] = match
            self.match_locks[match.id] = Lock()

    async def get(self, match_id: UUID) -> Optional[MatchSchema]:
        """Get the match with the specified match_id

        Args:
            match_id (UUID): ID to identify this match

        Returns:
            Optional[MatchSchema]: The match, or None if unknown or already pruned
        """
        async with self.lock:
            return self.matches.get(match_id)

    async def get_match_lock(self, match_id: UUID) -> Optional[Lock]:
        """Lock guarding one match, or None once the match is gone"""
        async with self.lock:
            if match_id not in self.matches:
                return None
            return self.match_locks.get(match_id)

    async def prune_expired(self, now: datetime) -> int:
        """Delete every match created before ``now - expiry``

        Args:
            now (datetime): Reference time for the sweep

        Returns:
            int: Number of matches removed
        """
        cutoff = now - self.expiry
        async with self.lock:
            expired = [
                match_id
                for match_id, match in self.matches.items()
                if match.created_at < cutoff
            ]
            for match_id in expired:
                del self.matches[match_id]
                self.match_locks.pop(match_id, None)
        if expired:
            logging.info(f"Pruned {len(expired)} expired matches")
        return len(expired)

    async def count(self) -> int:
        async with self.lock:
            return len(self.matches)
