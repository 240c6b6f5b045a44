from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from typing import Dict, Optional

from planning_poker import socketio, registry
from planning_poker.broadcast import NAMESPACE, close_room, deliver
from planning_poker.exceptions import PlanningPokerError
from planning_poker.models import Connection
from planning_poker.services.sessions import participants, voting


# Per-socket context recorded at join: which session, display name and
# the facilitator flag the client asserted
_sid_to_ctx: Dict[str, Connection] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _caller() -> Optional[Connection]:
    return _sid_to_ctx.get(_get_sid())


def _run(session_key, operation, *args) -> None:
    """Apply one operation and send its messages while holding the session lock."""
    with registry.locked(session_key):
        try:
            messages = operation(registry, session_key, *args)
        except PlanningPokerError as exc:
            current_app.logger.debug(f"[ignored] op={operation.__name__} session={session_key} reason={exc.message}")
            return
        deliver(messages)


def _leave(ctx: Connection) -> None:
    with registry.locked(ctx.session_key):
        messages = participants.leave(registry, ctx.session_key, ctx.sid, ctx.is_facilitator)
        deliver(messages)
    if ctx.is_facilitator:
        close_room(f"session:{ctx.session_key}")


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    ctx = _sid_to_ctx.pop(sid, None)
    if not ctx:
        return
    _leave(ctx)


def handle_join_session(data):
    data = _payload(data)
    sid = _get_sid()
    session_key = data.get('sessionId')
    is_facilitator = bool(data.get('isFacilitator'))

    # A socket belongs to one session at a time
    previous = _sid_to_ctx.get(sid)
    if previous and previous.session_key != session_key:
        _sid_to_ctx.pop(sid, None)
        leave_room(f"session:{previous.session_key}")
        _leave(previous)

    with registry.locked(session_key):
        try:
            messages = participants.join(registry, session_key, sid, data.get('userName'), is_facilitator)
        except PlanningPokerError as exc:
            current_app.logger.info(f"[join-rejected] sid={sid} session={session_key} reason={exc.message}")
            if exc.reported:
                emit('error', {'message': exc.message})
            return
        session = registry.get(session_key)
        join_room(session.room)
        _sid_to_ctx[sid] = Connection(
            sid=sid,
            session_key=session.id,
            user_name=data['userName'].strip(),
            is_facilitator=is_facilitator,
        )
        deliver(messages)


def handle_start_voting(data):
    data = _payload(data)
    _run(data.get('sessionId'), voting.start_voting, _caller(), data.get('storyName'), data.get('timerDuration'))


def handle_submit_vote(data):
    data = _payload(data)
    _run(data.get('sessionId'), voting.submit_vote, _caller(), data.get('vote'))


def handle_reveal_votes(data):
    data = _payload(data)
    _run(data.get('sessionId'), voting.reveal_votes, _caller())


def handle_end_voting(data):
    data = _payload(data)
    _run(data.get('sessionId'), voting.end_voting, _caller())


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join-session', handle_join_session, namespace=NAMESPACE)
    socketio.on_event('start-voting', handle_start_voting, namespace=NAMESPACE)
    socketio.on_event('submit-vote', handle_submit_vote, namespace=NAMESPACE)
    socketio.on_event('reveal-votes', handle_reveal_votes, namespace=NAMESPACE)
    socketio.on_event('end-voting', handle_end_voting, namespace=NAMESPACE)
