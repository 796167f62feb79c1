"""Bidirectional mapping between Metadata and the ``pass.json`` wire schema.

The canonical model uses snake_case attributes and keeps the pass style
as ``kind`` + ``pass_fields``. The wire document is camelCase, omits unset
values and flattens the field groups under a key named after the style
(``{"eventTicket": {"primaryFields": [...]}}``). Every rename is spelled
out in the tables below; nothing is derived by convention.

Example:
    >>> meta = Metadata(organization_name="Acme", description="d", serial_number="1")
    >>> metadata_to_wire(meta)["organizationName"]
    'Acme'
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pkpass.models.enums import PassKind
from pkpass.models.fields import Barcode, Beacon, Location, Nfc, PassField, PassFields, RgbColor
from pkpass.models.metadata import Metadata

# (model attribute, wire key)
_FIELD_KEYS: tuple[tuple[str, str], ...] = (
    ("key", "key"),
    ("value", "value"),
    ("label", "label"),
    ("attributed_value", "attributedValue"),
    ("change_message", "changeMessage"),
    ("currency_code", "currencyCode"),
    ("data_detector_types", "dataDetectorTypes"),
    ("date_style", "dateStyle"),
    ("time_style", "timeStyle"),
    ("ignores_time_zone", "ignoresTimeZone"),
    ("is_relative", "isRelative"),
    ("number_style", "numberStyle"),
    ("text_alignment", "textAlignment"),
    ("row", "row"),
)

_FIELD_GROUP_KEYS: tuple[tuple[str, str], ...] = (
    ("header", "headerFields"),
    ("primary", "primaryFields"),
    ("secondary", "secondaryFields"),
    ("auxiliary", "auxiliaryFields"),
    ("back", "backFields"),
)

_BARCODE_KEYS: tuple[tuple[str, str], ...] = (
    ("format", "format"),
    ("message", "message"),
    ("message_encoding", "messageEncoding"),
    ("alt_text", "altText"),
)

_LOCATION_KEYS: tuple[tuple[str, str], ...] = (
    ("latitude", "latitude"),
    ("longitude", "longitude"),
    ("altitude", "altitude"),
    ("relevant_text", "relevantText"),
)

_BEACON_KEYS: tuple[tuple[str, str], ...] = (
    ("proximity_uuid", "proximityUUID"),
    ("major", "major"),
    ("minor", "minor"),
    ("relevant_text", "relevantText"),
)

_NFC_KEYS: tuple[tuple[str, str], ...] = (
    ("message", "message"),
    ("encryption_public_key", "encryptionPublicKey"),
    ("requires_authentication", "requiresAuthentication"),
)

_HEAD_KEYS: tuple[tuple[str, str], ...] = (
    ("format_version", "formatVersion"),
    ("organization_name", "organizationName"),
    ("description", "description"),
    ("serial_number", "serialNumber"),
)

_COLOR_KEYS: tuple[tuple[str, str], ...] = (
    ("foreground_color", "foregroundColor"),
    ("background_color", "backgroundColor"),
    ("label_color", "labelColor"),
)

_TAIL_KEYS: tuple[tuple[str, str], ...] = (
    ("app_launch_url", "appLaunchURL"),
    ("associated_store_identifiers", "associatedStoreIdentifiers"),
    ("expiration_date", "expirationDate"),
    ("grouping_identifier", "groupingIdentifier"),
    ("logo_text", "logoText"),
    ("max_distance", "maxDistance"),
    ("relevant_date", "relevantDate"),
    ("sharing_prohibited", "sharingProhibited"),
    ("suppress_strip_shine", "suppressStripShine"),
    ("user_info", "userInfo"),
    ("voided", "voided"),
    ("web_service_url", "webServiceURL"),
    ("authentication_token", "authenticationToken"),
)

_LIST_KEYS: tuple[tuple[str, str], ...] = (
    ("barcodes", "barcodes"),
    ("locations", "locations"),
    ("beacons", "beacons"),
)

PASS_TYPE_IDENTIFIER_KEY = "passTypeIdentifier"
TEAM_IDENTIFIER_KEY = "teamIdentifier"
_KIND_KEYS = frozenset(kind.value for kind in PassKind)
_KNOWN_KEYS = frozenset(
    {PASS_TYPE_IDENTIFIER_KEY, TEAM_IDENTIFIER_KEY, "nfc"}
    | {key for table in (_HEAD_KEYS, _COLOR_KEYS, _TAIL_KEYS, _LIST_KEYS) for _, key in table}
    | _KIND_KEYS
)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _encode(model: Any, table: tuple[tuple[str, str], ...]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr, key in table:
        value = getattr(model, attr)
        if value is None:
            continue
        out[key] = _plain(value)
    return out


def _decode(doc: Mapping[str, Any], table: tuple[tuple[str, str], ...], what: str) -> dict[str, Any]:
    if not isinstance(doc, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(doc).__name__}")
    known = {key for _, key in table}
    unknown = sorted(set(doc) - known)
    if unknown:
        raise ValueError(f"unknown keys in {what}: {', '.join(unknown)}")
    return {attr: doc[key] for attr, key in table if key in doc}


def field_to_wire(field: PassField) -> dict[str, Any]:
    return _encode(field, _FIELD_KEYS)


def field_from_wire(doc: Mapping[str, Any]) -> PassField:
    return PassField.model_validate(_decode(doc, _FIELD_KEYS, "field"))


def fields_to_wire(fields: PassFields) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr, key in _FIELD_GROUP_KEYS:
        group = getattr(fields, attr)
        if group:
            out[key] = [field_to_wire(field) for field in group]
    if fields.transit_type is not None:
        out["transitType"] = fields.transit_type.value
    return out


def fields_from_wire(doc: Mapping[str, Any]) -> PassFields:
    table = _FIELD_GROUP_KEYS + (("transit_type", "transitType"),)
    raw = _decode(doc, table, "pass fields")
    kwargs: dict[str, Any] = {}
    for attr, value in raw.items():
        if attr == "transit_type":
            kwargs[attr] = value
        else:
            kwargs[attr] = [field_from_wire(item) for item in value]
    return PassFields.model_validate(kwargs)


def metadata_to_wire(meta: Metadata) -> dict[str, Any]:
    """Render Metadata as the ``pass.json`` document (insertion-ordered)."""
    doc = _encode(meta, _HEAD_KEYS[:1])
    doc[PASS_TYPE_IDENTIFIER_KEY] = meta.pass_type_identifier
    doc[TEAM_IDENTIFIER_KEY] = meta.team_identifier
    doc.update(_encode(meta, _HEAD_KEYS[1:]))

    for attr, key in _COLOR_KEYS:
        color = getattr(meta, attr)
        if color is not None:
            doc[key] = color.to_css()

    if meta.kind is not None:
        doc[meta.kind.value] = fields_to_wire(meta.pass_fields)

    if meta.barcodes:
        doc["barcodes"] = [_encode(barcode, _BARCODE_KEYS) for barcode in meta.barcodes]
    if meta.locations:
        doc["locations"] = [_encode(location, _LOCATION_KEYS) for location in meta.locations]
    if meta.beacons:
        doc["beacons"] = [_encode(beacon, _BEACON_KEYS) for beacon in meta.beacons]
    if meta.nfc is not None:
        doc["nfc"] = _encode(meta.nfc, _NFC_KEYS)

    for key, value in _encode(meta, _TAIL_KEYS).items():
        if key == "associatedStoreIdentifiers" and not value:
            continue
        doc[key] = value

    for key, value in meta.extra.items():
        doc.setdefault(key, value)
    return doc


def metadata_from_wire(doc: Mapping[str, Any]) -> Metadata:
    """Build Metadata from a decoded ``pass.json`` document.

    Unknown top-level keys are preserved in ``Metadata.extra``; nested
    objects are strict.

    Raises:
        ValueError: (including pydantic.ValidationError) on schema violations
    """
    if not isinstance(doc, Mapping):
        raise ValueError(f"pass.json must be a JSON object, got {type(doc).__name__}")

    kwargs: dict[str, Any] = {attr: doc[key] for attr, key in _HEAD_KEYS if key in doc}

    for attr, key in _COLOR_KEYS:
        if key in doc:
            kwargs[attr] = RgbColor.parse(doc[key])

    kinds = [key for key in doc if key in _KIND_KEYS]
    if len(kinds) > 1:
        raise ValueError(f"pass.json declares more than one pass style: {', '.join(kinds)}")
    if kinds:
        kwargs["kind"] = PassKind(kinds[0])
        kwargs["pass_fields"] = fields_from_wire(doc[kinds[0]])

    if "barcodes" in doc:
        kwargs["barcodes"] = [
            Barcode.model_validate(_decode(item, _BARCODE_KEYS, "barcode")) for item in doc["barcodes"]
        ]
    if "locations" in doc:
        kwargs["locations"] = [
            Location.model_validate(_decode(item, _LOCATION_KEYS, "location"))
            for item in doc["locations"]
        ]
    if "beacons" in doc:
        kwargs["beacons"] = [
            Beacon.model_validate(_decode(item, _BEACON_KEYS, "beacon")) for item in doc["beacons"]
        ]
    if "nfc" in doc:
        kwargs["nfc"] = Nfc.model_validate(_decode(doc["nfc"], _NFC_KEYS, "nfc"))

    kwargs.update({attr: doc[key] for attr, key in _TAIL_KEYS if key in doc})
    kwargs["extra"] = {key: value for key, value in doc.items() if key not in _KNOWN_KEYS}

    meta = Metadata.model_validate(kwargs)
    meta._stamp_identity(
        str(doc.get(PASS_TYPE_IDENTIFIER_KEY, "")),
        str(doc.get(TEAM_IDENTIFIER_KEY, "")),
    )
    return meta


def dump_metadata(meta: Metadata) -> bytes:
    """Serialize Metadata to compact UTF-8 JSON bytes."""
    return json.dumps(
        metadata_to_wire(meta), ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")


def load_metadata(data: bytes) -> Metadata:
    """Parse ``pass.json`` bytes; json and validation errors propagate."""
    return metadata_from_wire(json.loads(data))
