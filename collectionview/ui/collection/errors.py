"""
CollectionView exceptions.

Only programmer errors are raised. Data problems (duplicate identifiers) and
gesture races are recovered inside the engine and logged instead.
"""


class CollectionViewError(Exception):
    """Base class for collection view errors."""


class PreconditionError(CollectionViewError):
    """
    Raised when a caller breaks an API contract.

    Examples: floating a view that is not on screen, asking for the index of
    a view while a reload is rebuilding the index space.
    """
