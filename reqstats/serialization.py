from __future__ import annotations

from typing import Any
from xml.etree import ElementTree

from .models import PeakResponse, StatsSnapshot

_SCALAR_FIELDS = (
    "pid",
    "uptime",
    "uptime_sec",
    "time",
    "unixtime",
    "count",
    "total_count",
    "total_response_time",
    "total_response_time_sec",
    "average_response_time",
    "average_response_time_sec",
)


def to_json_dict(snapshot: StatsSnapshot) -> dict[str, Any]:
    return snapshot.model_dump(mode="json", by_alias=True)


def to_xml(snapshot: StatsSnapshot) -> bytes:
    """Encode a snapshot as ``<data>`` with scalar attributes and map children."""
    payload = to_json_dict(snapshot)
    root = ElementTree.Element("data", {name: str(payload[name]) for name in _SCALAR_FIELDS})

    for name, value in payload.items():
        if isinstance(value, dict) and name != "MaxResponseTimes":
            _append_map(root, name, value)

    _append_peak(root, payload["MaxResponseTimes"])
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


def _append_map(parent: ElementTree.Element, tag: str, values: dict[str, Any]) -> None:
    element = ElementTree.SubElement(parent, tag)
    for key, value in values.items():
        ElementTree.SubElement(element, "entry", {"key": key, "value": str(value)})


def _append_peak(parent: ElementTree.Element, peak: dict[str, Any]) -> None:
    element = ElementTree.SubElement(parent, "MaxResponseTimes")
    for field_info in PeakResponse.model_fields.values():
        alias = field_info.alias
        value = peak[alias]
        child = ElementTree.SubElement(element, alias)
        if isinstance(value, dict):
            child.attrib.update({key: str(item) for key, item in value.items()})
        elif value is not None:
            child.text = str(value)
