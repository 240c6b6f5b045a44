"""Planning poker errors.

Kept in one place so the Socket.IO and HTTP layers can translate them
uniformly. ``reported`` errors are sent back privately to the caller;
the rest are dropped after a debug log line.
"""


class PlanningPokerError(Exception):
    """Base class for all session errors."""
    reported = True
    message = 'Request could not be processed'

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class SessionNotFound(PlanningPokerError):
    message = 'Session not found'

    def __init__(self, session_key):
        self.session_key = session_key
        super().__init__()


class InvalidName(PlanningPokerError):
    """Blank display name at join."""
    message = 'Name is required to join the session'


class Unauthorized(PlanningPokerError):
    """Non-facilitator tried a facilitator-only operation."""
    reported = False
    message = 'Only the facilitator can do that'
