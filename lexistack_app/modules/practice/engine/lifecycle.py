"""One-shot lifecycle guard shared by the game engines."""

IDLE = 'idle'
ACTIVE = 'active'
COMPLETING = 'completing'
CLOSED = 'closed'

STATES = (IDLE, ACTIVE, COMPLETING, CLOSED)


class SessionLifecycle:
    """
    ``idle -> active -> completing -> closed``.

    Only the first completion trigger moves an active session to
    ``completing``; every later trigger sees a non-active state and backs off.
    The state is part of the engine snapshot, so the guard survives a request
    boundary.
    """

    def __init__(self, state=IDLE):
        if state not in STATES:
            raise ValueError(f"Unknown lifecycle state: {state!r}")
        self.state = state

    @property
    def is_active(self):
        return self.state == ACTIVE

    def activate(self):
        if self.state != IDLE:
            raise RuntimeError(f"Cannot activate a session in state '{self.state}'")
        self.state = ACTIVE

    def begin_completion(self):
        """Claim the right to complete. Returns False if another trigger already did."""
        if self.state != ACTIVE:
            return False
        self.state = COMPLETING
        return True

    def close(self):
        self.state = CLOSED

    def reset(self):
        """Start over for the next session of the same engine."""
        self.state = IDLE

    def __repr__(self):
        return f'<SessionLifecycle {self.state}>'
