"""
Error types raised at the environment boundary.

Termination is never an exception: a fallen robot is reported through the
terminal flag returned by BalanceEnv.step().
"""


class BalanceEnvError(Exception):
    """Base class for environment errors."""


class ContractViolation(BalanceEnvError):
    """The caller broke the step contract; the step was rejected untouched."""


class MissingReference(BalanceEnvError):
    """A required root body or joint was not supplied at initialization."""
