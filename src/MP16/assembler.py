"""
Two-pass row assembly.

Phasor measurements are processed first so every phasor group owns its
measurement point before frequency and calculated values look one up.
Rows repeating an already emitted (measurement point, quantity) pair are dropped.
"""

import logging
import typing

from collections import defaultdict
from dataclasses import dataclass, field

from .allocator import allocate_identifier
from .base_name import MAX_IDENTIFIER_LENGTH
from .compress import clean_identifier
from .final_row import FinalRow
from .line_group import extract_canonical_line_name, is_calculated_value, line_group_key
from .measurement import MeasurementRecord
from .planner import IdentifierAssignmentPlan
from .quantity import map_quantity
from .tokens import is_frequency_type, is_phasor_type
from .uniqueness import UsedIdentifiers

logger = logging.getLogger(__name__)


def _device_line_key(device: str, line_name: str) -> str:
    return f"{device}|{line_name}".upper()


@dataclass
class AssemblyContext:
    """
    Indices built up while assembling one run.

    Attributes:
        used: Measurement points allocated so far.
        emitted: (measurement point, quantity) pairs already written, upper-cased.
        groups: Upper-cased line-group key -> measurement point.
        line_names: Upper-cased 'device|line name' -> measurement point.
        device_phasors: Upper-cased device -> distinct phasor-group measurement points.
    """

    used: UsedIdentifiers = field(default_factory=UsedIdentifiers)
    emitted: set[tuple[str, str]] = field(default_factory=set)
    groups: dict[str, str] = field(default_factory=dict)
    line_names: dict[str, str] = field(default_factory=dict)
    device_phasors: dict[str, list[str]] = field(default_factory=lambda: defaultdict(list))

    def register(self, group_key: str, identifier: str, device: str, line_name: typing.Optional[str]) -> None:
        self.groups[group_key] = identifier
        self.used.add(identifier)
        if line_name:
            self.line_names[_device_line_key(device, line_name)] = identifier

    def register_phasor(self, device: str, identifier: str) -> None:
        identifiers = self.device_phasors[device.upper()]
        if identifier.upper() not in (known.upper() for known in identifiers):
            identifiers.append(identifier)

    def phasor_identifier_for(self, device: str) -> typing.Optional[str]:
        """The device's phasor measurement point, only if exactly one group exists."""
        if not device.strip():
            return None
        identifiers = self.device_phasors.get(device.upper(), [])
        return identifiers[0] if len(identifiers) == 1 else None

    def line_identifier_for(self, device: str, line_name: str) -> typing.Optional[str]:
        return self.line_names.get(_device_line_key(device, line_name))

    def emit(self, record: MeasurementRecord, identifier: str, quantity: str) -> typing.Optional[FinalRow]:
        row = FinalRow(
            device=record.device,
            description=record.description,
            identifier=identifier.upper(),
            quantity=quantity,
        )
        if row.dedup_key in self.emitted:
            logger.debug("Skipping duplicate %s / %s for signal %s", row.identifier, quantity, record.signal_id)
            return None
        self.emitted.add(row.dedup_key)
        return row


def _base_identifier(record: MeasurementRecord, plan: IdentifierAssignmentPlan) -> typing.Optional[str]:
    base = record.alternate_tag if record.has_alternate_tag else plan.generated_for(record.signal_id)
    if not base or len(base.strip()) > MAX_IDENTIFIER_LENGTH:
        return None
    return clean_identifier(base) or None


def _prepare(
    record: MeasurementRecord, plan: IdentifierAssignmentPlan, map_power_quantities: bool
) -> typing.Optional[tuple[str, str]]:
    if plan.is_excluded(record.signal_id):
        return None
    quantity = map_quantity(record, map_power_quantities=map_power_quantities)
    if quantity is None:
        logger.debug("No quantity mapping for signal %s (%s)", record.signal_id, record.signal_type)
        return None
    base = _base_identifier(record, plan)
    if base is None:
        return None
    return quantity, base


def _assemble_phasors(records, plan, context: AssemblyContext, map_power_quantities: bool) -> list[FinalRow]:
    rows: list[FinalRow] = []
    for record in records:
        if not is_phasor_type(record.signal_type):
            continue
        prepared = _prepare(record, plan, map_power_quantities)
        if prepared is None:
            continue
        quantity, base = prepared

        device = record.device or ""
        group_key = line_group_key(record).upper()
        identifier = context.groups.get(group_key)
        if identifier is None:
            identifier = allocate_identifier(record, base, context.used)
            context.register(group_key, identifier, device, extract_canonical_line_name(record))
            context.register_phasor(device, identifier)

        row = context.emit(record, identifier, quantity)
        if row is not None:
            rows.append(row)
    return rows


def _assemble_others(records, plan, context: AssemblyContext, map_power_quantities: bool) -> list[FinalRow]:
    rows: list[FinalRow] = []
    for record in records:
        if is_phasor_type(record.signal_type):
            continue
        prepared = _prepare(record, plan, map_power_quantities)
        if prepared is None:
            continue
        quantity, base = prepared

        device = record.device or ""
        group_key = line_group_key(record).upper()
        line_name = extract_canonical_line_name(record)
        identifier = context.groups.get(group_key)
        if identifier is None:
            if is_frequency_type(record.signal_type):
                identifier = context.phasor_identifier_for(device)
            elif line_name and is_calculated_value(record):
                identifier = context.line_identifier_for(device, line_name)
            if identifier is None:
                identifier = allocate_identifier(record, base, context.used)
            context.register(group_key, identifier, device, line_name)

        row = context.emit(record, identifier, quantity)
        if row is not None:
            rows.append(row)
    return rows


def assemble_rows(
    records: typing.Optional[typing.Iterable[MeasurementRecord]],
    plan: IdentifierAssignmentPlan,
    *,
    map_power_quantities: bool = False,
) -> list[FinalRow]:
    """
    Assign measurement points per line group and build the export rows.

    `records` defaults to the plan's stably ordered records; when given they
    must already carry the plan's generated identifiers or be resolvable
    through it. Phasor rows come first, followed by all other rows.
    """
    ordered = plan.records if records is None else list(records)
    context = AssemblyContext()
    rows = _assemble_phasors(ordered, plan, context, map_power_quantities)
    rows.extend(_assemble_others(ordered, plan, context, map_power_quantities))
    logger.info("Assembled %d rows from %d records", len(rows), len(ordered))
    return rows
