"""Action payloads accepted by the engine.

Each action is a tagged variant identified by its ``kind`` field. Payloads
coming from outside (UI, import files, scripts) are parsed with
``parse_action``, which rejects unknown kinds and malformed shapes instead of
defaulting missing fields.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from fatesim.models.base import FrozenModel
from fatesim.models.scenario import Choice
from fatesim.models.state import FundSource, FundType


class IncomeAction(FrozenModel):
    """Credit monthly income (gross; tax is deducted by the engine)."""

    kind: Literal["income"] = "income"
    amount: int | None = None


class ChoiceAction(FrozenModel):
    """Apply a scenario choice."""

    kind: Literal["choice"] = "choice"
    choice: Choice


class DepositAction(FrozenModel):
    """Move money from balance into savings."""

    kind: Literal["deposit"] = "deposit"
    amount: int


class WithdrawAction(FrozenModel):
    """Move money from savings back into balance."""

    kind: Literal["withdraw"] = "withdraw"
    amount: int


class StartInsuranceAction(FrozenModel):
    """Open an insurance policy."""

    kind: Literal["start_insurance"] = "start_insurance"
    monthly_premium: int
    coverage: int


class CancelInsuranceAction(FrozenModel):
    """Cancel the active insurance policy."""

    kind: Literal["cancel_insurance"] = "cancel_insurance"


class StartFixedDepositAction(FrozenModel):
    """Open a fixed deposit."""

    kind: Literal["start_fixed_deposit"] = "start_fixed_deposit"
    amount: int
    tenure: int
    interest_rate: float
    source: FundSource = FundSource.BALANCE


class StartMutualFundAction(FrozenModel):
    """Buy into a mutual fund."""

    kind: Literal["start_mutual_fund"] = "start_mutual_fund"
    amount: int
    fund_type: FundType = Field(alias="type")
    source: FundSource = FundSource.BALANCE


Action = Annotated[
    Union[
        IncomeAction,
        ChoiceAction,
        DepositAction,
        WithdrawAction,
        StartInsuranceAction,
        CancelInsuranceAction,
        StartFixedDepositAction,
        StartMutualFundAction,
    ],
    Field(discriminator="kind"),
]

# Actions a player takes directly. Income and choices are applied only by the
# month flow as part of starting a month and resolving its scenarios.
PLAYER_ACTIONS = (
    DepositAction,
    WithdrawAction,
    StartInsuranceAction,
    CancelInsuranceAction,
    StartFixedDepositAction,
    StartMutualFundAction,
)

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(payload: dict[str, Any]) -> Action:
    """Parse a raw payload into an action.

    Raises:
        pydantic.ValidationError: If the kind is unknown or fields are invalid
    """
    return _ACTION_ADAPTER.validate_python(payload)
