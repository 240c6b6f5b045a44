"""Outbound messages and their fan-out over Socket.IO.

Services describe what should be sent as ``Message`` values; ``deliver``
is the only place that touches the Socket.IO server.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from planning_poker import socketio

NAMESPACE = '/ws'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    event: str
    payload: Dict[str, Any]
    to: str
    private: bool = False


def to_connection(sid, event, payload) -> Message:
    return Message(event=event, payload=payload, to=sid, private=True)


def to_room(session, event, payload) -> Message:
    return Message(event=event, payload=payload, to=session.room)


def deliver(messages: Iterable[Message], namespace=NAMESPACE) -> None:
    """Send messages in order. Fire-and-forget: a failed send is logged and
    the remaining messages still go out."""
    for message in messages:
        try:
            socketio.emit(message.event, message.payload, to=message.to, namespace=namespace)
        except Exception:
            logger.exception(f"[deliver-failed] event={message.event} to={message.to}")


def close_room(room, namespace=NAMESPACE) -> None:
    try:
        socketio.close_room(room, namespace=namespace)
    except Exception:
        logger.exception(f"[close-room-failed] room={room}")
