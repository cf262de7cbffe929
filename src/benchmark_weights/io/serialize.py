"""JSON helpers for formulas and changes, keeping rationals exact."""

from __future__ import annotations

import hashlib
import json
import math
from fractions import Fraction
from pathlib import Path
from typing import Any, Iterable

from benchmark_weights.comparison.classifier import Verdict
from benchmark_weights.comparison.comparator import Change, ExtrapolationMethod
from benchmark_weights.registry.registry import Registry
from benchmark_weights.terms.term import Component, Formula, Term


def encode_number(value: Fraction | float | int | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        value = Fraction(value)
    return str(Fraction(value))


def decode_number(text: str | None) -> Fraction | float | None:
    if text is None:
        return None
    if text in ("inf", "-inf"):
        return float(text)
    return Fraction(text)


def formula_to_dict(formula: Formula) -> dict[str, Any]:
    return {
        "terms": [
            {"coefficient": encode_number(term.coefficient), "component": term.component}
            for term in formula.terms
        ],
        "components": [
            {
                "name": component.name,
                "min": component.minimum,
                "max": component.maximum,
                "declared": component.declared,
            }
            for component in formula.components
        ],
    }


def formula_from_dict(data: dict[str, Any]) -> Formula:
    terms = [Term(Fraction(item["coefficient"]), item["component"]) for item in data["terms"]]
    components = [
        Component(item["name"], item["min"], item["max"], item.get("declared", False))
        for item in data["components"]
    ]
    return Formula.build(terms, components)


def change_to_dict(change: Change, verdict: Verdict | None = None) -> dict[str, Any]:
    payload = {
        "identifier": change.identifier,
        "old": formula_to_dict(change.old) if change.old is not None else None,
        "new": formula_to_dict(change.new) if change.new is not None else None,
        "delta": encode_number(change.delta),
        "method": ExtrapolationMethod(change.method).value,
        "old_value": encode_number(change.old_value),
        "new_value": encode_number(change.new_value),
        "point": {name: encode_number(value) for name, value in change.point.items()},
        "warning": change.warning,
    }
    if verdict is not None:
        payload["verdict"] = verdict.value
    return payload


def change_from_dict(data: dict[str, Any]) -> Change:
    return Change(
        identifier=data["identifier"],
        old=formula_from_dict(data["old"]) if data["old"] is not None else None,
        new=formula_from_dict(data["new"]) if data["new"] is not None else None,
        delta=decode_number(data["delta"]),
        method=ExtrapolationMethod(data["method"]),
        old_value=decode_number(data["old_value"]),
        new_value=decode_number(data["new_value"]),
        point={name: decode_number(value) for name, value in data["point"].items()},
        warning=data.get("warning"),
    )


def write_jsonl(changes: Iterable[Change | tuple[Change, Verdict]], path: str | Path) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        for item in changes:
            change, verdict = item if isinstance(item, tuple) else (item, None)
            handle.write(json.dumps(change_to_dict(change, verdict), sort_keys=True) + "\n")


def registry_digest(registry: Registry) -> str:
    payload = {identifier: formula_to_dict(registry[identifier].formula) for identifier in registry}
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def cache_key(
    old: Registry,
    new: Registry,
    method: ExtrapolationMethod,
    threshold: Fraction | float,
    default_max: int | None = None,
) -> str:
    """Content hash identifying one ``compare`` call, for external memoization."""
    payload = {
        "old": registry_digest(old),
        "new": registry_digest(new),
        "method": ExtrapolationMethod(method).value,
        "threshold": encode_number(threshold),
        "default_max": default_max,
    }
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
