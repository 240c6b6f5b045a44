"""Voting round controller.

A session moves between three phases::

    idle --start--> voting --reveal / everyone voted--> revealed
      ^               |                                     |
      +------end------+----------------end------------------+

Starting is also allowed from revealed (the previous round is dropped
without being archived). Only ``end_voting`` archives a round.

Facilitator-only operations raise ``Unauthorized``; the transport drops
it without telling anyone. Any other request that does not apply to the
current phase returns no messages.
"""
import logging
from typing import List, Optional

from planning_poker.broadcast import Message, to_room
from planning_poker.exceptions import SessionNotFound, Unauthorized
from planning_poker.models import Connection, HistoryEntry, Vote, now_ms
from planning_poker.services.sessions.stats import calculate_statistics

logger = logging.getLogger(__name__)


def _session_for(registry, session_key):
    session = registry.get(session_key)
    if session is None:
        raise SessionNotFound(session_key)
    return session


def _require_facilitator(session, caller: Optional[Connection]) -> None:
    # Trusts the flag the connection asserted when it joined
    if caller is None or not caller.is_facilitator or caller.session_key != session.id:
        raise Unauthorized()


def _timer_duration(value, default):
    if isinstance(value, bool):
        return default
    try:
        seconds = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return seconds if seconds > 0 else default


def start_voting(registry, session_key, caller, story_name, timer_duration=None) -> List[Message]:
    session = _session_for(registry, session_key)
    _require_facilitator(session, caller)
    if not isinstance(story_name, str) or not story_name.strip():
        logger.debug(f"[vote-start-ignored] session={session.id} blank story")
        return []

    timer = _timer_duration(timer_duration, registry.default_timer)
    session.current_story = story_name.strip()
    session.votes.clear()
    session.voting_active = True
    session.timer_duration = timer
    session.timer_start = now_ms()
    logger.info(f"[vote-start] session={session.id} story={session.current_story!r} timer={session.timer_duration}s")

    return [to_room(session, 'voting-started', {
        'storyName': session.current_story,
        'timerDuration': session.timer_duration,
        'timerStart': session.timer_start,
    })]


def submit_vote(registry, session_key, caller, value) -> List[Message]:
    """Record or replace the caller's vote.

    The room only learns who has voted. Once every participant has a vote
    the round is revealed straight away, within this same call. The
    facilitator may vote too; such a vote is stored but the reveal check
    still compares against participants only.
    """
    session = _session_for(registry, session_key)
    if caller is None or caller.session_key != session.id:
        return []
    if not session.voting_active:
        logger.debug(f"[vote-ignored] session={session.id} sid={caller.sid} no active round")
        return []

    session.votes[caller.sid] = Vote(user_name=caller.user_name, value=value, submitted_at=now_ms())
    total = len(session.participants)
    voted = len(session.votes)
    messages = [to_room(session, 'votes-update', {
        'votes': session.masked_votes(),
        'totalParticipants': total,
        'votedCount': voted,
    })]
    logger.info(f"[vote] session={session.id} voted={voted}/{total}")

    if total > 0 and voted == total:
        session.voting_active = False
        messages.append(to_room(session, 'votes-revealed', {
            'votes': session.revealed_votes(),
            'autoRevealed': True,
        }))
        logger.info(f"[auto-reveal] session={session.id} story={session.current_story!r}")
    return messages


def reveal_votes(registry, session_key, caller) -> List[Message]:
    session = _session_for(registry, session_key)
    _require_facilitator(session, caller)
    if session.current_story is None:
        logger.debug(f"[reveal-ignored] session={session.id} no round")
        return []

    session.voting_active = False
    logger.info(f"[reveal] session={session.id} votes={len(session.votes)}")
    return [to_room(session, 'votes-revealed', {'votes': session.revealed_votes()})]


def end_voting(registry, session_key, caller) -> List[Message]:
    """Archive the round (when it has votes) and go back to idle."""
    session = _session_for(registry, session_key)
    _require_facilitator(session, caller)

    if session.current_story is not None and session.votes:
        votes = tuple((v.user_name, v.value) for v in session.votes.values())
        entry = HistoryEntry(
            story_name=session.current_story,
            votes=votes,
            statistics=calculate_statistics(votes, unsure_vote=registry.unsure_vote),
            timestamp=now_ms(),
        )
        session.history.append(entry)
        logger.info(f"[archive] session={session.id} story={entry.story_name!r} history={len(session.history)}")

    session.voting_active = False
    session.current_story = None
    session.votes.clear()
    return [to_room(session, 'voting-ended', {'history': session.history_payload()})]
