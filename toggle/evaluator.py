"""Feature flag evaluation against a user's context."""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from toggle.evaluation_types import EvaluationContext
from toggle.flag_model import Flag, Rule

_MISSING = object()


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    _, digits, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    count = len(text)
    point = count + exponent
    exp = point - 1
    neg = "-" if value < 0 else ""
    if exp < -4 or exp >= 6:
        mantissa = text[0] + ("." + text[1:] if count > 1 else "")
        return f"{neg}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{neg}0.{'0' * -point}{text}"
    if point >= count:
        return f"{neg}{text}{'0' * (point - count)}"
    return f"{neg}{text[:point]}.{text[point:]}"


def _format(value: Any) -> str:
    """Render a value the way values are compared for equality."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{_format(k)}:{_format(v)}" for k, v in items) + "]"
    return str(value)


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


class Evaluator:
    """Decides whether a flag is on for a user. Never raises on bad rules."""

    def evaluate(self, flag: Flag, ctx: EvaluationContext) -> bool:
        """Whether ``flag`` is enabled for ``ctx``; fails safe to False."""
        if not flag.enabled:
            return False
        if not flag.rules:
            return flag.enabled
        if not self._evaluate_rules(flag, ctx):
            return False
        rollout = flag.rules[0].rollout
        return self.consistent_hash(ctx.user_id, flag.id) <= rollout

    def consistent_hash(self, user_id: str, flag_id: str) -> int:
        """A stable bucket in 0..100 for the user and flag."""
        digest = hashlib.sha256(f"{user_id}:{flag_id}".encode()).digest()
        return int.from_bytes(digest[:8], "big") % 101

    def _evaluate_rules(self, flag: Flag, ctx: EvaluationContext) -> bool:
        matches = (self._evaluate_rule(rule, ctx) for rule in flag.rules)
        if flag.rule_logic == "AND":
            return all(matches)
        return any(matches)

    def _evaluate_rule(self, rule: Rule, ctx: EvaluationContext) -> bool:
        attributes = ctx.attributes or {}
        attr = attributes.get(rule.attribute, _MISSING)
        if attr is _MISSING:
            return False

        operator = rule.operator
        if operator == "equals":
            return _format(attr) == _format(rule.value)
        if operator == "not_equals":
            return _format(attr) != _format(rule.value)
        if operator == "in":
            return self._contains(attr, rule.value)
        if operator == "not_in":
            return not self._contains(attr, rule.value)
        if operator in ("greater_than", "less_than"):
            left, right = _to_number(attr), _to_number(rule.value)
            if left is None or right is None:
                return False
            return left > right if operator == "greater_than" else left < right
        return False

    @staticmethod
    def _contains(attr: Any, values: Any) -> bool:
        if not isinstance(values, (list, tuple)):
            return False
        wanted = _format(attr)
        return any(_format(item) == wanted for item in values)