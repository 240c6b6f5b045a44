import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

IDLE = 'idle'
VOTING = 'voting'
REVEALED = 'revealed'


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_session_key(length=8):
    """Generate a short session key from a random uuid."""
    return uuid.uuid4().hex[:length]


@dataclass
class Connection:
    """Transport-side context recorded for a socket when it joins."""
    sid: str
    session_key: str
    user_name: str
    is_facilitator: bool = False


@dataclass
class Participant:
    id: str
    name: str
    connected: bool = True

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'connected': self.connected,
        }


@dataclass
class Vote:
    user_name: str
    value: Any
    submitted_at: int

    def masked(self):
        return {'userName': self.user_name, 'voted': True}

    def to_dict(self):
        return {'userName': self.user_name, 'vote': self.value}


@dataclass(frozen=True)
class Statistics:
    average: float
    min: float
    max: float

    def to_dict(self):
        return {'average': self.average, 'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class HistoryEntry:
    """One archived round. Built completely before being appended."""
    story_name: str
    votes: Tuple[Tuple[str, Any], ...]
    statistics: Optional[Statistics]
    timestamp: int

    @property
    def completed_at(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)
        return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    def to_dict(self):
        return {
            'storyName': self.story_name,
            'votes': [{'userName': name, 'vote': value} for name, value in self.votes],
            'statistics': self.statistics.to_dict() if self.statistics else None,
            'timestamp': self.timestamp,
            'completedAt': self.completed_at,
        }


@dataclass
class Session:
    id: str
    facilitator: str
    participants: List[Participant] = field(default_factory=list)
    current_story: Optional[str] = None
    votes: Dict[str, Vote] = field(default_factory=dict)
    voting_active: bool = False
    timer_duration: int = 15
    timer_start: Optional[int] = None
    history: List[HistoryEntry] = field(default_factory=list)
    # Serializes every mutation of this record and the broadcasts it causes
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def phase(self) -> str:
        if self.voting_active:
            return VOTING
        if self.current_story is not None:
            return REVEALED
        return IDLE

    @property
    def room(self) -> str:
        return f"session:{self.id}"

    def participant_ids(self):
        return {p.id for p in self.participants}

    def participants_payload(self):
        return [p.to_dict() for p in self.participants]

    def history_payload(self):
        return [h.to_dict() for h in self.history]

    def masked_votes(self):
        return [v.masked() for v in self.votes.values()]

    def revealed_votes(self):
        return [v.to_dict() for v in self.votes.values()]

    def to_state(self, is_facilitator=False):
        """Full snapshot sent privately to a joining connection."""
        return {
            'sessionId': self.id,
            'facilitator': self.facilitator,
            'participants': self.participants_payload(),
            'currentStory': self.current_story,
            'votingActive': self.voting_active,
            'isFacilitator': bool(is_facilitator),
            'history': self.history_payload(),
            'timerDuration': self.timer_duration,
            'timerStart': self.timer_start,
        }

    def summary(self):
        return {
            'sessionId': self.id,
            'facilitator': self.facilitator,
            'participantCount': len(self.participants),
            'phase': self.phase,
            'votingActive': self.voting_active,
            'historyLength': len(self.history),
        }
