"""Content negotiation and response rendering

``negotiate`` maps an ``Accept`` header onto one of a fixed set of formats and
``render`` turns a member, or a list of members, into a response in that
format. Error bodies do not go through here, they are always JSON.
"""

import xml.etree.ElementTree as ET
from enum import Enum
from typing import Optional, Union

import yaml
from fastapi.responses import JSONResponse, Response

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


class Format(str, Enum):
    JSON = "json"
    XML = "xml"
    YAML = "yaml"


MEDIA_TYPES = {
    "application/json": Format.JSON,
    "application/xml": Format.XML,
    "text/xml": Format.XML,
    "text/yaml": Format.YAML,
    "text/x-yaml": Format.YAML,
    "application/yaml": Format.YAML,
    "application/x-yaml": Format.YAML,
}


class UTF8JSONResponse(JSONResponse):
    """JSON response announcing its charset"""
    media_type = "application/json; charset=utf-8"


def _parse_accept(accept: str) -> list:
    """Split an Accept header into (media_type, q, position) tuples"""
    entries = []
    for position, part in enumerate(accept.split(",")):
        params = [p.strip() for p in part.split(";")]
        media_type = params[0].lower()
        if not media_type:
            continue
        q = 1.0
        for param in params[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        entries.append((media_type, q, position))
    return entries


def negotiate(accept: Optional[str]) -> Format:
    """Pick the response format for an Accept header.

    The highest-q supported media type wins, ties are broken by header order.
    Wildcards, a missing header and headers naming only unsupported types
    all fall back to JSON.
    """
    if not accept:
        return Format.JSON

    candidates = []
    for media_type, q, position in _parse_accept(accept):
        if q <= 0:
            continue
        if media_type in MEDIA_TYPES:
            candidates.append((-q, position, MEDIA_TYPES[media_type]))
        elif media_type in ("*/*", "application/*"):
            candidates.append((-q, position, Format.JSON))

    if not candidates:
        return Format.JSON
    return min(candidates)[2]


def _xml_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _xml_element(tag: str, record: dict) -> ET.Element:
    element = ET.Element(tag)
    for key, value in record.items():
        child = ET.SubElement(element, key)
        child.text = _xml_text(value)
    return element


def to_xml(data: Union[dict, list]) -> str:
    """Serialise a member (``<Member>``) or list of members (``<Members>``)"""
    if isinstance(data, list):
        root = ET.Element("Members")
        for record in data:
            root.append(_xml_element("Member", record))
    else:
        root = _xml_element("Member", data)
    return XML_DECLARATION + "\n" + ET.tostring(root, encoding="unicode")


def to_yaml(data: Union[dict, list]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def render(
    data: Union[dict, list],
    accept: Optional[str] = None,
    status_code: int = 200,
    headers: Optional[dict] = None
) -> Response:
    """Build a response for ``data`` in the format the client asked for"""
    fmt = negotiate(accept)

    if fmt is Format.XML:
        return Response(
            content=to_xml(data),
            status_code=status_code,
            headers=headers,
            media_type="application/xml"
        )

    if fmt is Format.YAML:
        return Response(
            content=to_yaml(data),
            status_code=status_code,
            headers=headers,
            media_type="text/yaml"
        )

    return UTF8JSONResponse(content=data, status_code=status_code, headers=headers)
