"""
Error types shared by the controller and hosts.

Backend failures (DecryptionError, EncryptionError) live with the
backend contract in ordo.crypto.backend.
"""


class OrdoError(Exception):
    """Base class for all errors raised by ordo."""
    pass


class PreconditionViolation(OrdoError):
    """
    A transition was requested in the wrong state.

    Fatal to the current command; document state is left untouched.
    """
    pass


class UserCancelled(OrdoError):
    """
    An interactive prompt was aborted.

    Unwinds the transition in progress. Not an error from the user's
    point of view and never logged as one.
    """
    pass
