"""Exceptions raised by efnash."""


class SubgameMarkingError(AssertionError):
    """
    An information set could not be attributed to any marked subgame.

    Indicates a malformed or stale subgame marking. Not recoverable.
    """
