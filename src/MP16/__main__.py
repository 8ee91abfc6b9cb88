"""
Command-line interface for the MP16 toolkit.
Reads active measurements from a configuration database or a CSV/Excel export,
assigns short measurement point names and writes the signal mapping CSV.
"""

import json
import logging
import sys
import typing

import click

from stairval.notepad import create_notepad

from .exporter import export_measurement_points, write_rows_csv
from .loader import MeasurementLoadError, load_measurement_table
from .mapper import MeasurementMapper
from .measurement import MeasurementRecord
from .planner import build_assignment_plan
from .settings import ExportSettings, SettingsError, load_settings
from .store import MeasurementStore, MeasurementStoreError

SOURCE_ERRORS = (MeasurementLoadError, MeasurementStoreError, SettingsError)


@click.group()
def main():
    """MP16: short, permanent measurement point names for phasor measurements."""
    pass


def _configure_logging(verbose_logging: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


def _fail(message: str) -> typing.NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _source_options(func):
    func = click.option(
        "-c",
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        help="TOML settings file with an [export] table",
    )(func)
    func = click.option(
        "-i",
        "--input",
        "input_path",
        type=click.Path(exists=True, dir_okay=False),
        help="CSV or Excel export of the active measurements",
    )(func)
    func = click.option(
        "-d",
        "--database",
        "database_path",
        type=click.Path(exists=True, dir_okay=False),
        help="SQLite configuration database with an ActiveMeasurement view",
    )(func)
    return func


def _load_records(
    database_path: typing.Optional[str], input_path: typing.Optional[str], notepad
) -> tuple[list[MeasurementRecord], typing.Optional[MeasurementStore]]:
    if bool(database_path) == bool(input_path):
        _fail("Specify exactly one of --database or --input")
    if database_path:
        store = MeasurementStore(database_path)
        return store.load_records(notepad), store
    df = load_measurement_table(input_path)
    return MeasurementMapper(source_name=click.format_filename(input_path)).map_table(df, notepad), None


def _report_issues(notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in mapping:")
        for err in notepad.errors():
            click.echo(f"- {err}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in mapping:")
        for w in notepad.warnings():
            click.echo(f"- {w}")


@main.command(name="export")
@_source_options
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False, writable=True), help="CSV file to write")
@click.option("--company-acronym", default=None, help="Organization acronym stripped from point tags")
@click.option("--exclude-prefix", "exclude_prefixes", multiple=True, help="Extra point tag prefix to strip (repeatable)")
@click.option("--persist/--no-persist", default=None, help="Write generated names back to the database")
@click.option("--map-power/--no-map-power", default=None, help="Also export MW / MVA / MVAR quantities")
@click.option("--verbose-logging", is_flag=True, help="Also emit debug logs to stderr")
@click.option("--log-file-path", type=click.Path(dir_okay=False, writable=True), help="Append timestamped logs to this file")
def export(
    database_path: typing.Optional[str],
    input_path: typing.Optional[str],
    config_path: typing.Optional[str],
    output_path: typing.Optional[str],
    company_acronym: typing.Optional[str],
    exclude_prefixes: tuple[str, ...],
    persist: typing.Optional[bool],
    map_power: typing.Optional[bool],
    verbose_logging: bool,
    log_file_path: typing.Optional[str],
):
    """
    Assign measurement points and write the signal mapping CSV.
    """
    _configure_logging(verbose_logging, log_file_path)

    try:
        settings = load_settings(config_path).merged(
            company_acronym=company_acronym,
            excluded_prefixes=exclude_prefixes or None,
            persist_identifiers=persist,
            map_power_quantities=map_power,
            output_path=output_path,
        )
        notepad = create_notepad("measurements")
        records, store = _load_records(database_path, input_path, notepad)
        result = export_measurement_points(records, settings, notepad=notepad, store=store)
        written_to = write_rows_csv(result.rows, settings.output_path)
    except SOURCE_ERRORS as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"Could not write output: {e}")

    _report_issues(notepad)

    click.echo(f"Total measurements loaded: {result.total_loaded}")
    click.echo(f"Rows exported: {result.exported}")
    click.echo(f"Measurement points generated: {result.identifiers_generated}")
    click.echo(f"Measurement points persisted: {result.identifiers_persisted}")
    click.echo(f"Excluded (measurement point longer than 16): {result.excluded_too_long}")
    click.echo(f"Wrote {result.exported} rows to {written_to}")


@main.command(name="audit-names")
@_source_options
@click.option("-r", "--raw-json", is_flag=True, help="Output audit entries as raw JSON")
def audit_names(
    database_path: typing.Optional[str],
    input_path: typing.Optional[str],
    config_path: typing.Optional[str],
    raw_json: bool,
):
    """
    Show, per measurement, whether its name exists, would be generated,
    is excluded as too long, or cannot be derived.
    """
    try:
        settings = load_settings(config_path)
        notepad = create_notepad("measurements")
        records, _ = _load_records(database_path, input_path, notepad)
    except SOURCE_ERRORS as e:
        _fail(str(e))

    entries = audit_entries(records, settings)

    if raw_json:
        click.echo(json.dumps(entries, indent=2))
        return

    click.echo(f"{'SIGNAL_ID':36}  {'STATUS':9}  {'IDENTIFIER':16}  POINT_TAG")
    for entry in entries:
        click.echo(
            f"{entry['signal_id']:36}  {entry['status']:9}  {entry['identifier'] or '-':16}  {entry['point_tag'] or '-'}"
        )
    _report_issues(notepad)


def audit_entries(records: typing.Sequence[MeasurementRecord], settings: ExportSettings) -> list[dict]:
    plan = build_assignment_plan(records, settings.prefixes)
    entries = []
    for record in plan.records:
        if plan.is_excluded(record.signal_id):
            status = "excluded"
        elif plan.generated_for(record.signal_id) is not None and record.alternate_tag == plan.generated_for(record.signal_id):
            status = "generated"
        elif record.has_alternate_tag:
            status = "existing"
        else:
            status = "unnamed"
        entries.append(
            {
                "signal_id": record.signal_id,
                "point_tag": record.point_tag,
                "device": record.device,
                "status": status,
                "identifier": record.alternate_tag.strip() if record.has_alternate_tag else None,
            }
        )
    return entries


if __name__ == "__main__":
    main()
