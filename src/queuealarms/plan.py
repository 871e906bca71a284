"""Plan file serialization for split (build-then-apply) mode.

Layout, in this exact order::

    REGION=us-east-1
    ALARM_SUFFIX=-cloudwatch-alarm
    ---CREATE---
    orders|orders-cloudwatch-alarm|5
    ---DELETE---
    stale-cloudwatch-alarm
    ---SUMMARY---
    CREATE_COUNT=1
    DELETE_COUNT=1

The downstream apply step reads this format, so it must not drift.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .exceptions import PlanFormatError
from .naming import NamingConvention
from .reconciler import CreateAction, ReconciliationPlan

logger = logging.getLogger(__name__)

CREATE_MARKER = "---CREATE---"
DELETE_MARKER = "---DELETE---"
SUMMARY_MARKER = "---SUMMARY---"
FIELD_SEPARATOR = "|"


def render_plan(plan: ReconciliationPlan) -> str:
    lines: List[str] = [
        f"REGION={plan.region}",
        f"{plan.convention.plan_key}={plan.convention.marker}",
        CREATE_MARKER,
    ]
    lines.extend(
        FIELD_SEPARATOR.join((action.queue_name, action.alarm_name, str(action.threshold)))
        for action in plan.creates
    )
    lines.append(DELETE_MARKER)
    lines.extend(plan.deletes)
    lines.extend(
        [
            SUMMARY_MARKER,
            f"CREATE_COUNT={len(plan.creates)}",
            f"DELETE_COUNT={len(plan.deletes)}",
        ]
    )
    return "\n".join(lines) + "\n"


def write_plan(plan: ReconciliationPlan, path: str | Path) -> Path:
    """Write the plan, replacing any previous plan at ``path``."""
    plan_path = Path(path)
    plan_path.write_text(render_plan(plan), encoding="utf-8")
    logger.info("Plan saved to %s", plan_path)
    return plan_path


def format_plan_for_display(plan: ReconciliationPlan) -> str:
    return f"=== PLAN CONTENTS ===\n{render_plan(plan)}=== END PLAN ==="


def _key_value(line: str, line_number: int) -> tuple[str, str]:
    key, sep, value = line.partition("=")
    if not sep:
        raise PlanFormatError(f"Expected KEY=VALUE, got {line!r}", line_number=line_number)
    return key, value


def _expect(lines: List[str], index: int, marker: str) -> None:
    if index >= len(lines) or lines[index] != marker:
        found = lines[index] if index < len(lines) else "end of file"
        raise PlanFormatError(f"Expected {marker}, found {found!r}", line_number=index + 1)


def parse_plan(text: str) -> ReconciliationPlan:
    """Parse plan text produced by :func:`render_plan`.

    Raises:
        PlanFormatError: on any deviation from the layout, or when the
            summary counts disagree with the listed actions
    """
    lines = [line.rstrip("\r") for line in text.splitlines()]
    if len(lines) < 2:
        raise PlanFormatError("Plan is missing its header lines")

    key, region = _key_value(lines[0], 1)
    if key != "REGION":
        raise PlanFormatError(f"Expected REGION=, found {lines[0]!r}", line_number=1)

    key, marker = _key_value(lines[1], 2)
    try:
        convention = NamingConvention.from_plan_key(key)
    except ValueError as e:
        raise PlanFormatError(str(e), line_number=2) from e
    if marker != convention.marker:
        raise PlanFormatError(f"Unsupported {key} value: {marker!r}", line_number=2)

    plan = ReconciliationPlan(region=region, convention=convention)

    _expect(lines, 2, CREATE_MARKER)
    index = 3
    while index < len(lines) and lines[index] != DELETE_MARKER:
        parts = lines[index].split(FIELD_SEPARATOR)
        if len(parts) != 3:
            raise PlanFormatError(f"Malformed create line: {lines[index]!r}", line_number=index + 1)
        queue_name, alarm_name, threshold = parts
        try:
            plan.creates.append(CreateAction(queue_name, alarm_name, int(threshold)))
        except ValueError as e:
            raise PlanFormatError(f"Invalid threshold {threshold!r}", line_number=index + 1) from e
        index += 1

    _expect(lines, index, DELETE_MARKER)
    index += 1
    while index < len(lines) and lines[index] != SUMMARY_MARKER:
        plan.deletes.append(lines[index])
        index += 1

    _expect(lines, index, SUMMARY_MARKER)
    counts = {}
    for offset, line in enumerate(lines[index + 1:], start=index + 2):
        if not line:
            continue
        key, value = _key_value(line, offset)
        counts[key] = value

    expected = {"CREATE_COUNT": len(plan.creates), "DELETE_COUNT": len(plan.deletes)}
    for key, actual in expected.items():
        if key not in counts:
            raise PlanFormatError(f"Summary is missing {key}")
        if counts[key] != str(actual):
            raise PlanFormatError(f"{key}={counts[key]} does not match {actual} listed action(s)")

    return plan


def read_plan(path: str | Path) -> ReconciliationPlan:
    plan_path = Path(path)
    if not plan_path.exists():
        raise FileNotFoundError(f"Plan file not found: {plan_path}")
    return parse_plan(plan_path.read_text(encoding="utf-8"))
