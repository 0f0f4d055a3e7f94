from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import reduce
from typing import Any

from .models import Interest, ScoringContext

ContextPredicate = Callable[[ScoringContext], bool]


@dataclass(frozen=True)
class FieldEquals:
    """Matches when a context field holds a given value."""

    field: str
    value: Any

    def __call__(self, context: ScoringContext) -> bool:
        return getattr(context, self.field) == self.value


@dataclass(frozen=True)
class FieldPresent:
    """Matches when an optional context field has been provided."""

    field: str

    def __call__(self, context: ScoringContext) -> bool:
        return getattr(context, self.field) is not None


@dataclass(frozen=True)
class HasInterest:
    interest: Interest

    def __call__(self, context: ScoringContext) -> bool:
        return self.interest in context.interests


@dataclass(frozen=True)
class WeightRule:
    """Shift weight between dimensions when ``when`` matches the context."""

    when: ContextPredicate
    deltas: Mapping[str, float]


def rule(when: ContextPredicate, **deltas: float) -> WeightRule:
    return WeightRule(when=when, deltas=deltas)


def validate_rules(base_weights: Mapping[str, float], rules: tuple[WeightRule, ...]) -> None:
    """Raise ValueError if a rule names a dimension the weight table does not have."""
    for weight_rule in rules:
        unknown = set(weight_rule.deltas) - set(base_weights)
        if unknown:
            raise ValueError(f"Weight rule {weight_rule.when!r} adjusts unknown dimensions: {sorted(unknown)}")


def compute_weight_profile(
    base_weights: Mapping[str, float],
    rules: tuple[WeightRule, ...],
    context: ScoringContext,
    renormalize: bool = False,
) -> dict[str, float]:
    """Fold the matching rules' deltas into the base weights.

    Adjustments are additive and unclamped. The shipped rules all move weight
    between dimensions, so the profile keeps summing to 1.0 without any
    renormalization; ``renormalize`` rescales explicitly for tables that don't.
    """

    def apply(weights: dict[str, float], weight_rule: WeightRule) -> dict[str, float]:
        if not weight_rule.when(context):
            return weights
        return {dim: w + weight_rule.deltas.get(dim, 0.0) for dim, w in weights.items()}

    weights = reduce(apply, rules, dict(base_weights))

    if renormalize:
        total = sum(weights.values())
        if total > 0:
            weights = {dim: w / total for dim, w in weights.items()}
    return weights
