"""
Error taxonomy. Every one of these is fatal to the poll loop.

No retries happen anywhere in the monitor. A supervising process restarts it
and the resume marker keeps the restart from replaying delivered pastes.
"""


class MonitorError(Exception):
    """Base class for all monitor failures."""
    pass


class FetchError(MonitorError):
    """Network failure, non-200 status, or an undecodable payload."""
    pass


class NoPastesError(MonitorError):
    """The upstream returned an empty window. It is never expected to be empty."""
    pass


class StateError(MonitorError):
    """The resume marker couldn't be read or written."""
    pass


class HandlerError(MonitorError):
    """A paste handler raised. The caller signalled it can't make progress."""
    pass
