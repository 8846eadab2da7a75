"""Signal and scoring configuration models."""

from __future__ import annotations

import math

from pydantic import BaseModel, field_validator, model_validator

# Short, medium and long-term trend
DEFAULT_MA_PERIODS = [30, 50, 200]


class DipThresholds(BaseModel):
    """Percentage dips below a moving average that trigger a buy alert.

    Comparisons are strict: a dip equal to a threshold does not reach it.
    """

    exceptional: float = 7.0
    strong: float = 5.0
    moderate: float = 3.0

    @model_validator(mode="after")
    def _validate(self):
        if not (self.exceptional > self.strong > self.moderate > 0):
            raise ValueError(
                "dip thresholds must satisfy exceptional > strong > moderate > 0, "
                f"got {self.exceptional}/{self.strong}/{self.moderate}"
            )
        return self


class ScoringWeights(BaseModel):
    """Weights of the opportunity score components. Must sum to 1.0."""

    price_dip: float = 0.4
    trend_strength: float = 0.3
    ma_alignment: float = 0.3

    @model_validator(mode="after")
    def _validate(self):
        weights = (self.price_dip, self.trend_strength, self.ma_alignment)
        if any(w < 0 for w in weights):
            raise ValueError(f"scoring weights must be non-negative, got {weights}")
        if not math.isclose(sum(weights), 1.0, rel_tol=0.0, abs_tol=1e-9):
            raise ValueError(f"scoring weights must sum to 1.0, got {sum(weights)}")
        return self


class SignalConfig(BaseModel):
    """Configuration for moving averages and signal scoring."""

    ma_periods: list[int] = list(DEFAULT_MA_PERIODS)
    thresholds: DipThresholds = DipThresholds()
    weights: ScoringWeights = ScoringWeights()

    # Spread of MA30 over MA50 (in %) at which trend strength saturates
    trend_saturation_pct: float = 5.0

    @field_validator("ma_periods")
    @classmethod
    def _validate_periods(cls, value: list[int]) -> list[int]:
        if len(value) != 3:
            raise ValueError(f"exactly three MA periods required, got {value}")
        if any(p <= 0 for p in value) or sorted(set(value)) != value:
            raise ValueError(f"MA periods must be positive and strictly increasing, got {value}")
        return value

    @property
    def short_period(self) -> int:
        return self.ma_periods[0]

    @property
    def medium_period(self) -> int:
        return self.ma_periods[1]

    @property
    def long_period(self) -> int:
        return self.ma_periods[2]
