"""Exception types raised by the simulation.

Only caller-actionable conditions (bad amounts, insufficient funds, choices
that do not belong to the active scenario) propagate out of the month flow.
Generator and persistence failures are absorbed there and replaced with
deterministic fallbacks.
"""

from __future__ import annotations


class FateSimError(Exception):
    """Base class for all simulation errors."""


class InvalidAmount(FateSimError, ValueError):
    """A money amount was zero, negative or otherwise unusable."""


class InsufficientFunds(FateSimError, ValueError):
    """The source account holds less than the requested amount.

    Attributes:
        required: Amount the operation needed
        available: Amount actually held by the source
        source: "balance" or "savings"
    """

    def __init__(self, required: int, available: int, source: str):
        self.required = required
        self.available = available
        self.source = source
        super().__init__(
            f"Insufficient funds in {source}: need {required}, have {available}"
        )


class InvalidScenarioShape(FateSimError, ValueError):
    """A generated scenario failed structural validation."""


class GeneratorFailure(FateSimError, RuntimeError):
    """The external content generator failed or returned unusable output."""


class PersistenceFailure(FateSimError, RuntimeError):
    """Saving or loading a game state failed."""


class ImportValidationError(FateSimError, ValueError):
    """An imported game state file was malformed or belonged to another user."""


class NoActiveScenario(FateSimError, RuntimeError):
    """A choice was submitted while no scenario is awaiting an answer."""


class InvalidChoice(FateSimError, ValueError):
    """A choice does not belong to the scenario currently being played."""
