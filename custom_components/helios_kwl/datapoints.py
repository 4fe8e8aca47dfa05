"""Static catalog of known easyControls variables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Final


class Access(StrEnum):
    """Access mode reported for a device variable."""

    READ_ONLY = "R"
    READ_WRITE = "RW"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """Metadata describing one device variable."""

    description: str
    access: Access
    variable: str
    remark: str = ""
    minimum: float | None = None
    maximum: float | None = None

    @property
    def writable(self) -> bool:
        """Return True when the variable accepts write commands."""

        return self.access is not Access.READ_ONLY


def _entry(
    identifier: str,
    description: str,
    access: str,
    remark: str,
    minimum: float | None = None,
    maximum: float | None = None,
) -> tuple[str, CatalogEntry]:
    return identifier, CatalogEntry(
        description=description,
        access=Access(access),
        variable=identifier,
        remark=remark,
        minimum=minimum,
        maximum=maximum,
    )


CATALOG: Final[Mapping[str, CatalogEntry]] = MappingProxyType(
    dict(
        [
            _entry("v00000", "Article description", "R", "Device model"),
            _entry("v00001", "REF number", "R", "Reference number"),
            _entry("v00002", "MAC address", "R", "Network MAC address"),
            _entry("v00003", "Language", "RW", "Web interface language"),
            _entry("v00004", "Date", "RW", "Device date (dd.mm.yyyy)"),
            _entry("v00005", "Time", "RW", "Device time (hh:mm)"),
            _entry("v00006", "Summer time", "RW", "Daylight saving time", 0, 1),
            _entry("v00007", "Auto time update", "RW", "Synchronise time via NTP", 0, 1),
            _entry("v00008", "Time zone offset", "RW", "Difference to GMT in hours", -12, 14),
            _entry("v00009", "Date format", "RW", "0 dd.mm.yy, 1 mm.dd.yy, 2 yy.mm.dd", 0, 2),
            _entry("v00024", "Heat exchanger type", "RW", "1 plastic, 2 aluminium, 3 enthalpy", 1, 3),
            _entry("v00101", "Operating mode", "RW", "0 automatic, 1 manual", 0, 1),
            _entry("v00102", "Fan stage", "RW", "Manual fan stage", 0, 4),
            _entry("v00103", "Fan stage percent", "R", "Current fan output in percent"),
            _entry("v00104", "Outdoor air temperature", "R", "Temperature sensor T1"),
            _entry("v00105", "Supply air temperature", "R", "Temperature sensor T2"),
            _entry("v00106", "Exhaust air temperature", "R", "Temperature sensor T3"),
            _entry("v00107", "Extract air temperature", "R", "Temperature sensor T4"),
            _entry("v00201", "Party duration", "RW", "Party mode duration in minutes", 5, 180),
            _entry("v00202", "Party fan stage", "RW", "Fan stage during party mode", 0, 4),
            _entry("v00203", "Party remaining time", "R", "Remaining party time in minutes"),
            _entry("v00204", "Party mode", "RW", "0 off, 1 on", 0, 1),
            _entry("v00211", "Quiet duration", "RW", "Quiet mode duration in minutes", 5, 180),
            _entry("v00212", "Quiet fan stage", "RW", "Fan stage during quiet mode", 0, 4),
            _entry("v00213", "Quiet remaining time", "R", "Remaining quiet time in minutes"),
            _entry("v00214", "Quiet mode", "RW", "0 off, 1 on", 0, 1),
            _entry("v00601", "Holiday mode", "RW", "0 off, 1 interval, 2 constant", 0, 2),
            _entry("v00602", "Holiday fan stage", "RW", "Fan stage during holiday mode", 0, 4),
            _entry("v00603", "Holiday start", "RW", "Holiday start date (dd.mm.yyyy)"),
            _entry("v00604", "Holiday end", "RW", "Holiday end date (dd.mm.yyyy)"),
            _entry("v00605", "Holiday interval", "RW", "Interval in hours", 1, 24),
            _entry("v00606", "Holiday activation period", "RW", "Activation period in minutes", 5, 300),
            _entry("v01017", "CO2 control", "RW", "0 off, 1 stepped, 2 continuous", 0, 2),
            _entry("v01035", "Bypass room temperature", "RW", "Bypass activation temperature", 10, 40),
            _entry("v01036", "Bypass minimum outdoor temperature", "RW", "Bypass release limit", 5, 20),
            _entry("v01041", "Weekly program", "RW", "Selected weekly program", 0, 10),
            _entry("v01050", "Supply air fan speed", "R", "Supply air fan in rpm"),
            _entry("v01051", "Extract air fan speed", "R", "Extract air fan in rpm"),
            _entry("v01061", "Filter change interval", "RW", "Filter change interval in months", 3, 12),
            _entry("v01062", "Filter remaining time", "R", "Minutes until the next filter change"),
            _entry("v01101", "Preheater", "RW", "0 off, 1 on", 0, 1),
            _entry("v01102", "Preheater temperature", "RW", "Preheater set point", -6, 0),
            _entry("v01300", "Error messages", "R", "Error bit field"),
            _entry("v01301", "Warning messages", "R", "Warning bit field"),
            _entry("v01302", "Info messages", "R", "Info bit field"),
            _entry("v01303", "Error count", "R", "Number of active errors"),
            _entry("v01304", "Warning count", "R", "Number of active warnings"),
            _entry("v01305", "Info count", "R", "Number of active infos"),
            _entry("v02115", "Extract air humidity", "R", "Relative humidity in percent"),
            _entry("v02136", "Supply air humidity", "R", "Relative humidity in percent"),
            _entry("v02142", "Software version", "R", "Firmware version"),
        ]
    )
)


def resolve_entry(identifier: str) -> CatalogEntry:
    """Return catalog metadata for ``identifier``.

    Identifiers missing from the catalog fall back to a synthetic writable
    entry named after the identifier itself.
    """

    entry = CATALOG.get(identifier)
    if entry is not None:
        return entry
    return CatalogEntry(
        description=identifier,
        access=Access.READ_WRITE,
        variable=identifier,
    )


def storage_path(entry: CatalogEntry) -> str:
    """Return the state path derived from ``entry``'s description."""

    return entry.description.replace(" ", "_").replace(".", "")


__all__ = ["CATALOG", "Access", "CatalogEntry", "resolve_entry", "storage_path"]
