"""Enumerations for pkpass.

This module defines the enum types used for asset addressing, read
policy and the metadata display vocabulary, so no magic strings leak
into the archive code.
"""

from enum import Enum


class ImageKind(str, Enum):
    """Image asset kinds; the value is the file stem inside the archive."""

    ICON = "icon"
    LOGO = "logo"
    BACKGROUND = "background"
    STRIP = "strip"
    FOOTER = "footer"
    THUMBNAIL = "thumbnail"


class Density(str, Enum):
    """Resolution variant of an image; the value is the file name suffix.

    Example:
        >>> Density.from_suffix("2x")
        <Density.X2: '@2x'>
        >>> Density.STANDARD.attr
        'standard'
    """

    STANDARD = ""
    X2 = "@2x"
    X3 = "@3x"

    @classmethod
    def from_suffix(cls, suffix: str) -> "Density":
        """Map the text after ``@`` (``2x``/``3x``) to a variant; raises ValueError."""
        return cls("@" + suffix)

    @property
    def attr(self) -> str:
        """Attribute name on ImageVariants."""
        return _DENSITY_ATTRS[self]


_DENSITY_ATTRS = {Density.STANDARD: "standard", Density.X2: "x2", Density.X3: "x3"}


class VerifyMode(str, Enum):
    """Read-time verification policy.

    SKIP still checks every member against the manifest; it only skips the
    signature-over-manifest check.
    """

    SKIP = "skip"
    VERIFY = "verify"


class ReadStage(str, Enum):
    """Stages of an archive read.

    Opened -> EntriesLocated -> [SignatureChecked] -> ManifestParsed ->
    MetadataParsed -> AssetsVerified -> Done. Any failure is terminal.
    """

    OPENED = "opened"
    ENTRIES_LOCATED = "entries_located"
    SIGNATURE_CHECKED = "signature_checked"
    MANIFEST_PARSED = "manifest_parsed"
    METADATA_PARSED = "metadata_parsed"
    ASSETS_VERIFIED = "assets_verified"
    DONE = "done"


class PassKind(str, Enum):
    """Pass style; the value is the wire key holding the pass fields."""

    BOARDING_PASS = "boardingPass"
    COUPON = "coupon"
    EVENT_TICKET = "eventTicket"
    GENERIC = "generic"
    STORE_CARD = "storeCard"


class TransitType(str, Enum):
    AIR = "PKTransitTypeAir"
    BOAT = "PKTransitTypeBoat"
    BUS = "PKTransitTypeBus"
    GENERIC = "PKTransitTypeGeneric"
    TRAIN = "PKTransitTypeTrain"


class BarcodeFormat(str, Enum):
    QR = "PKBarcodeFormatQR"
    PDF417 = "PKBarcodeFormatPDF417"
    AZTEC = "PKBarcodeFormatAztec"
    # Not supported on watchOS.
    CODE128 = "PKBarcodeFormatCode128"


class DateStyle(str, Enum):
    NONE = "PKDateStyleNone"
    SHORT = "PKDateStyleShort"
    MEDIUM = "PKDateStyleMedium"
    LONG = "PKDateStyleLong"
    FULL = "PKDateStyleFull"


class NumberStyle(str, Enum):
    DECIMAL = "PKNumberStyleDecimal"
    PERCENT = "PKNumberStylePercent"
    SCIENTIFIC = "PKNumberStyleScientific"
    SPELL_OUT = "PKNumberStyleSpellOut"


class TextAlignment(str, Enum):
    LEFT = "PKTextAlignmentLeft"
    CENTER = "PKTextAlignmentCenter"
    RIGHT = "PKTextAlignmentRight"
    NATURAL = "PKTextAlignmentNatural"


class DetectorType(str, Enum):
    """Data detectors applied to back-of-pass field values."""

    PHONE_NUMBER = "PKDataDetectorTypePhoneNumber"
    LINK = "PKDataDetectorTypeLink"
    ADDRESS = "PKDataDetectorTypeAddress"
    CALENDAR_EVENT = "PKDataDetectorTypeCalendarEvent"


class RowBehaviour(int, Enum):
    """Auxiliary field row placement; serialized as 0 or 1."""

    KEEP_ROW = 0
    NEW_ROW = 1
