"""Exception hierarchy for did-matched-sets.

Every error raised on purpose by the package derives from ``MatchedSetError``.
Input problems additionally derive from ``ValueError`` so callers that only
catch the builtin keep working.
"""


class MatchedSetError(Exception):
    """Base class for all did-matched-sets errors."""


class PanelValidationError(MatchedSetError, ValueError):
    """The input table cannot be turned into a valid panel index.

    Raised before any treated events or matched sets are produced; there is
    no partial result.
    """


class MissingColumnError(PanelValidationError):
    """A required column (unit, time, or treatment) is absent."""


class NamingAmbiguityError(PanelValidationError):
    """A required column name matches more than one column.

    Also raised when two roles in ``PanelConfig`` point at the same column.
    """


class TypeValidationError(PanelValidationError):
    """Unit, time, or treatment values are non-numeric, missing, or
    (for unit and time) not integer-valued."""


class StructuralInvariantError(PanelValidationError):
    """Duplicate (unit, time) pairs, or a treatment value outside {0, 1}."""


class InvalidParameterError(MatchedSetError, ValueError):
    """A call argument is out of range.

    Common triggers:

    - a lookback length that is not a positive integer
    - an unknown ``integer_check`` mode
    - ``times`` and ``ids`` of different lengths
    - an empty history window (``t_start > t_end``)
    """
