"""Session domain services: participants, voting rounds and statistics.

This package contains the state machine of a planning poker session. It
is imported by the Socket.IO handlers, which own the transport, and it
returns outbound messages instead of sending them. Callers hold
``session.lock`` (``SessionRegistry.locked``) around each operation and
its delivery.
"""
