"""Pool error classes.

Arithmetic and domain failures (an allocation outside a tick's range, a
crossing that runs past either end of the tick table) are deliberately
undifferentiated: they all raise PoolMathError. Callers that need safe limits
compute them up front with the max-step helpers instead of inspecting errors.

Business-rule failures with a defined recovery path derive from PoolError.
"""


class PoolMathError(ArithmeticError):
    """Pricing arithmetic failed or left the configured tick domain."""

    pass


class PoolError(Exception):
    """Base error for rejected pool operations."""

    pass


class SlippageError(PoolError):
    """Quoted amount is worse than the caller's bound."""

    pass


class AllocationBoundError(PoolError):
    """Proportional mint/burn would push an allocation outside its bounds."""

    pass


class TargetAllocationError(PoolError):
    """Equalizing swap would move an asset past (or away from) its target."""

    pass


class MaxReservesExceededError(PoolError):
    """Total canonical reserves would exceed the configured cap."""

    pass


class BountyExceedsSurplusError(PoolError):
    """Equalization bounty increase is not covered by collected fees."""

    pass


class UnknownAssetError(PoolError, KeyError):
    """Asset has no configuration in the pool."""

    pass


class ConfigurationError(PoolError, ValueError):
    """Asset or tick configuration is malformed."""

    pass
