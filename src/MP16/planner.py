"""
Identifier assignment planning.

The planner decides, once per run, which records already own a measurement
point, which ones are excluded because their existing point is over-long, and
which ones receive a newly generated base identifier that should be persisted.
Existing measurement points are never altered.
"""

import logging
import typing

from dataclasses import dataclass, field

from .base_name import MAX_IDENTIFIER_LENGTH, build_base_identifier
from .measurement import MeasurementRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifierUpdate:
    """
    A newly generated measurement point waiting to be written back.

    Attributes:
        signal_id: Signal the measurement point belongs to.
        identifier: Generated base identifier.
    """

    signal_id: str
    identifier: str


@dataclass
class IdentifierAssignmentPlan:
    """
    Outcome of planning one batch of records.

    Attributes:
        excluded_signal_ids: Upper-cased signal ids whose existing measurement point
            exceeds the length limit; these never reach the output and are never rewritten.
        generated: Upper-cased signal id -> newly generated base identifier.
        updates: Pairs to persist, in stable record order.
        records: All input records in stable order, generated identifiers applied.
    """

    excluded_signal_ids: set[str] = field(default_factory=set)
    generated: dict[str, str] = field(default_factory=dict)
    updates: list[IdentifierUpdate] = field(default_factory=list)
    records: list[MeasurementRecord] = field(default_factory=list)

    def is_excluded(self, signal_id: str) -> bool:
        return signal_id.upper() in self.excluded_signal_ids

    def generated_for(self, signal_id: str) -> typing.Optional[str]:
        return self.generated.get(signal_id.upper())


def record_sort_key(record: MeasurementRecord) -> typing.Tuple[str, str, str]:
    """
    Total ordering that defines which record is "first" in every later stage.
    """
    return (record.device or "", record.point_tag, record.signal_id)


def build_assignment_plan(
    records: typing.Iterable[MeasurementRecord],
    prefixes: typing.Sequence[str] = (),
) -> IdentifierAssignmentPlan:
    """
    Plan measurement point assignment for a batch of records.

    Records are stably sorted by device, point tag and signal id. A record with
    an existing measurement point keeps it; one longer than the limit is
    excluded. A record without one gets a base identifier derived from its point
    tag, or nothing when no name can be derived from the tag.
    """
    plan = IdentifierAssignmentPlan()
    ordered = sorted(records, key=record_sort_key)

    # Exclusions are settled for every record before any generation
    for record in ordered:
        if not record.has_alternate_tag:
            continue
        existing = record.alternate_tag.strip()
        if len(existing) > MAX_IDENTIFIER_LENGTH:
            logger.debug(
                "Excluding signal %s: measurement point %r exceeds %d characters",
                record.signal_id,
                existing,
                MAX_IDENTIFIER_LENGTH,
            )
            plan.excluded_signal_ids.add(record.signal_id.upper())

    for record in ordered:
        signal_key = record.signal_id.upper()

        if record.has_alternate_tag or signal_key in plan.excluded_signal_ids:
            plan.records.append(record)
            continue

        base = build_base_identifier(record.point_tag, prefixes)
        if base is None:
            logger.debug("No measurement point derivable from point tag %r", record.point_tag)
            plan.records.append(record)
            continue

        if signal_key in plan.generated:
            # Duplicate signal id in the input: the first record keeps the name
            plan.records.append(record.with_identifier(plan.generated[signal_key]))
            continue

        logger.debug("Generated measurement point %s for signal %s", base, record.signal_id)
        plan.generated[signal_key] = base
        plan.updates.append(IdentifierUpdate(record.signal_id, base))
        plan.records.append(record.with_identifier(base))

    logger.info(
        "Planned %d records: %d generated, %d excluded as too long",
        len(plan.records),
        len(plan.generated),
        len(plan.excluded_signal_ids),
    )
    return plan
