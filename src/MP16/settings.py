"""
Export settings.

Defaults can be overridden by the `[export]` table of a TOML file and then by
command-line options:

    [export]
    company_acronym = "GPA"
    excluded_prefixes = ["ETR", "EES", "ESI"]
    persist_identifiers = false
    map_power_quantities = false
    output_path = "sel-sttpreader-signalmappings.csv"
"""

import pathlib
import tomllib
import typing

from dataclasses import dataclass, fields, replace


class SettingsError(RuntimeError):
    """Raised when a settings file is missing or malformed."""


@dataclass(frozen=True)
class ExportSettings:
    """
    Configuration of one export run.

    Attributes:
        company_acronym: Organization acronym stripped from point tags first.
        excluded_prefixes: Further prefixes stripped from point tags, in order.
        persist_identifiers: Write generated measurement points back to the store.
        map_power_quantities: Also export power quantities (MW, MVA, MVAR).
        output_path: CSV file the signal mappings are written to.
    """

    company_acronym: str = "GPA"
    excluded_prefixes: tuple[str, ...] = ("ETR", "EES", "ESI")
    persist_identifiers: bool = False
    map_power_quantities: bool = False
    output_path: str = "sel-sttpreader-signalmappings.csv"

    @property
    def prefixes(self) -> tuple[str, ...]:
        return (self.company_acronym, *self.excluded_prefixes)

    def merged(self, **overrides: typing.Any) -> "ExportSettings":
        """Return a copy with every override that is not None applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "excluded_prefixes" in changes:
            changes["excluded_prefixes"] = tuple(changes["excluded_prefixes"])
        return replace(self, **changes)


_FIELD_TYPES: dict[str, type] = {
    "company_acronym": str,
    "excluded_prefixes": list,
    "persist_identifiers": bool,
    "map_power_quantities": bool,
    "output_path": str,
}


def _validate(table: dict[str, typing.Any], path: pathlib.Path) -> dict[str, typing.Any]:
    known = {f.name for f in fields(ExportSettings)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise SettingsError(f"Unknown setting(s) in {path}: {', '.join(unknown)}")

    values: dict[str, typing.Any] = {}
    for key, value in table.items():
        expected = _FIELD_TYPES[key]
        if not isinstance(value, expected):
            raise SettingsError(f"Setting {key!r} in {path} must be a {expected.__name__}, got {type(value).__name__}")
        if key == "excluded_prefixes":
            if not all(isinstance(item, str) for item in value):
                raise SettingsError(f"Setting 'excluded_prefixes' in {path} must be a list of strings")
            value = tuple(value)
        values[key] = value
    return values


def load_settings(path: str | pathlib.Path | None = None) -> ExportSettings:
    """
    Load export settings; with no path the defaults are returned.
    """
    if path is None:
        return ExportSettings()

    path_obj = pathlib.Path(path)
    if not path_obj.is_file():
        raise SettingsError(f"Settings file does not exist: {path_obj}")
    try:
        with path_obj.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise SettingsError(f"Could not read settings from {path_obj}: {exc}") from exc

    table = document.get("export", {})
    if not isinstance(table, dict):
        raise SettingsError(f"[export] in {path_obj} must be a table")
    return ExportSettings(**_validate(table, path_obj))
