"""Canonical in-memory model of the ``pass.json`` document.

The archive core treats metadata as an opaque serializable document: it
only ever stamps the two issuer-scoped identifiers derived from the
signing certificate. Those two values are exposed read-only here; the
archive writer (and the wire decoder) are the only code that sets them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, PrivateAttr, model_validator

from pkpass.models.base import PkPassBaseModel
from pkpass.models.enums import PassKind
from pkpass.models.fields import Barcode, Beacon, Location, Nfc, PassFields, RgbColor

FORMAT_VERSION = 1
MAX_LOCATIONS = 10


class Metadata(PkPassBaseModel):
    """Pass metadata, independent of its wire spelling.

    Example:
        >>> meta = Metadata(organization_name="Acme", description="d", serial_number="1")
        >>> meta.pass_type_identifier
        ''
    """

    model_config = ConfigDict(frozen=False)

    format_version: int = FORMAT_VERSION
    organization_name: str
    description: str
    serial_number: str

    kind: PassKind | None = None
    pass_fields: PassFields = Field(default_factory=PassFields)

    foreground_color: RgbColor | None = None
    background_color: RgbColor | None = None
    label_color: RgbColor | None = None
    logo_text: str | None = None

    barcodes: list[Barcode] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list, max_length=MAX_LOCATIONS)
    beacons: list[Beacon] = Field(default_factory=list)
    nfc: Nfc | None = None
    max_distance: int | None = Field(default=None, ge=0)

    relevant_date: datetime | None = None
    expiration_date: datetime | None = None
    voided: bool | None = None
    sharing_prohibited: bool | None = None
    suppress_strip_shine: bool | None = None
    grouping_identifier: str | None = None

    app_launch_url: str | None = None
    associated_store_identifiers: list[int] = Field(default_factory=list)
    user_info: dict[str, Any] | None = None

    web_service_url: str | None = None
    authentication_token: str | None = Field(default=None, min_length=16, repr=False)

    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Wire keys this model does not know, kept verbatim.",
    )

    _pass_type_identifier: str = PrivateAttr(default="")
    _team_identifier: str = PrivateAttr(default="")

    @model_validator(mode="after")
    def _check_consistency(self) -> Metadata:
        if self.pass_fields.transit_type is not None and self.kind is not PassKind.BOARDING_PASS:
            raise ValueError("transit_type is only valid for boarding passes")
        return self

    @property
    def pass_type_identifier(self) -> str:
        """Pass type identifier of the certificate used for the last write."""
        return self._pass_type_identifier

    @property
    def team_identifier(self) -> str:
        """Team identifier of the certificate used for the last write."""
        return self._team_identifier

    def _stamp_identity(self, pass_type_identifier: str, team_identifier: str) -> None:
        self._pass_type_identifier = pass_type_identifier
        self._team_identifier = team_identifier
