import logging
from typing import List

from planning_poker.broadcast import Message, to_connection, to_room
from planning_poker.exceptions import InvalidName, SessionNotFound
from planning_poker.models import Participant

logger = logging.getLogger(__name__)

SESSION_ENDED_MESSAGE = 'The facilitator has left the session'


def clean_name(user_name) -> str:
    if not isinstance(user_name, str) or not user_name.strip():
        raise InvalidName()
    return user_name.strip()


def join(registry, session_key, sid, user_name, is_facilitator=False) -> List[Message]:
    """Add a connection to a session.

    The facilitator is never listed as a participant. The joining
    connection gets the full session state; the room gets the new
    participant list.
    """
    session = registry.get(session_key)
    if session is None:
        raise SessionNotFound(session_key)
    name = clean_name(user_name)

    if is_facilitator:
        # a connection re-joining as facilitator stops being a participant
        session.participants = [p for p in session.participants if p.id != sid]
    elif sid not in session.participant_ids():
        session.participants.append(Participant(id=sid, name=name))
    logger.info(f"[join] session={session.id} sid={sid} name={name!r} facilitator={bool(is_facilitator)}")

    return [
        to_connection(sid, 'session-state', session.to_state(is_facilitator=is_facilitator)),
        to_room(session, 'participant-joined', {'participants': session.participants_payload()}),
    ]


def leave(registry, session_key, sid, is_facilitator=False) -> List[Message]:
    """Remove a connection from a session.

    Dropping a vote here never reveals the round, even when everyone
    remaining has voted. When the facilitator leaves the session ends.
    """
    session = registry.get(session_key)
    if session is None:
        return []

    session.participants = [p for p in session.participants if p.id != sid]
    session.votes.pop(sid, None)
    messages = [to_room(session, 'participant-left', {'participants': session.participants_payload()})]
    logger.info(f"[leave] session={session.id} sid={sid} facilitator={bool(is_facilitator)}")

    if is_facilitator:
        messages.append(to_room(session, 'session-ended', {'message': SESSION_ENDED_MESSAGE}))
        registry.delete(session.id)
        logger.info(f"[session-ended] session={session.id}")
    return messages
