"""Metadata sub-models: pass fields, barcodes, locations, beacons, NFC and colours.

These are the canonical in-memory shapes. Their ``pass.json`` spelling
lives in :mod:`pkpass.models.wire`.
"""

from __future__ import annotations

import re

from pydantic import Field, model_validator

from pkpass.models.base import PkPassBaseModel
from pkpass.models.enums import (
    BarcodeFormat,
    DateStyle,
    DetectorType,
    NumberStyle,
    RowBehaviour,
    TextAlignment,
    TransitType,
)

_RGB_PATTERN = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$")
_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


class RgbColor(PkPassBaseModel):
    """A colour; serialized as a CSS-style ``rgb(r,g,b)`` triple.

    Example:
        >>> RgbColor.parse("rgb(23, 187, 82)").to_css()
        'rgb(23,187,82)'
        >>> RgbColor.parse("#ff0000")
        RgbColor(red=255, green=0, blue=0)
    """

    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)

    @classmethod
    def white(cls) -> RgbColor:
        return cls(red=255, green=255, blue=255)

    @classmethod
    def black(cls) -> RgbColor:
        return cls(red=0, green=0, blue=0)

    @classmethod
    def parse(cls, value: str) -> RgbColor:
        """Parse ``rgb(r, g, b)`` or ``#rrggbb``; raises ValueError otherwise."""
        text = value.strip()
        match = _RGB_PATTERN.match(text)
        if match:
            red, green, blue = (int(part) for part in match.groups())
            return cls(red=red, green=green, blue=blue)
        match = _HEX_PATTERN.match(text)
        if match:
            red, green, blue = (int(part, 16) for part in match.groups())
            return cls(red=red, green=green, blue=blue)
        raise ValueError(f"could not parse color: {value!r}")

    def to_css(self) -> str:
        return f"rgb({self.red},{self.green},{self.blue})"


class PassField(PkPassBaseModel):
    """One key/value entry displayed on the pass."""

    key: str = Field(..., min_length=1)
    value: str | int | float
    label: str | None = None
    attributed_value: str | None = None
    change_message: str | None = Field(
        default=None,
        description="Alert text when the field changes; must contain %@.",
    )
    currency_code: str | None = None
    data_detector_types: list[DetectorType] | None = None
    date_style: DateStyle | None = None
    time_style: DateStyle | None = None
    ignores_time_zone: bool | None = None
    is_relative: bool | None = None
    number_style: NumberStyle | None = None
    text_alignment: TextAlignment | None = None
    row: RowBehaviour | None = None

    @model_validator(mode="after")
    def _check_change_message(self) -> PassField:
        if self.change_message is not None and "%@" not in self.change_message:
            raise ValueError("change_message must contain the %@ placeholder")
        return self


class PassFields(PkPassBaseModel):
    """Field groups of a pass style."""

    header: list[PassField] = Field(default_factory=list)
    primary: list[PassField] = Field(default_factory=list)
    secondary: list[PassField] = Field(default_factory=list)
    auxiliary: list[PassField] = Field(default_factory=list)
    back: list[PassField] = Field(default_factory=list)
    transit_type: TransitType | None = None

    def is_empty(self) -> bool:
        return not (
            self.header
            or self.primary
            or self.secondary
            or self.auxiliary
            or self.back
            or self.transit_type
        )


class Barcode(PkPassBaseModel):
    format: BarcodeFormat
    message: str
    message_encoding: str = "iso-8859-1"
    alt_text: str | None = None


class Location(PkPassBaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    altitude: float | None = None
    relevant_text: str | None = None


class Beacon(PkPassBaseModel):
    """Bluetooth Low Energy beacon that makes the pass relevant."""

    proximity_uuid: str
    major: int | None = Field(default=None, ge=0, le=65535)
    minor: int | None = Field(default=None, ge=0, le=65535)
    relevant_text: str | None = None


class Nfc(PkPassBaseModel):
    """Value Added Services protocol payload."""

    # Terminals truncate anything past 64 bytes.
    message: str
    encryption_public_key: str
    requires_authentication: bool | None = None
