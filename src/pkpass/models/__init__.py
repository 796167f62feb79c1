"""pkpass Models.

This module provides the in-memory model of a pass: the pydantic metadata
catalog with its wire mapping, asset slots and the asset table, and the
Pass aggregate that ties them together.
"""

# Base models
from pkpass.models.base import PkPassBaseModel

# Enums
from pkpass.models.enums import (
    BarcodeFormat,
    DateStyle,
    Density,
    DetectorType,
    ImageKind,
    NumberStyle,
    PassKind,
    ReadStage,
    RowBehaviour,
    TextAlignment,
    TransitType,
    VerifyMode,
)

# Metadata catalog
from pkpass.models.fields import (
    Barcode,
    Beacon,
    Location,
    Nfc,
    PassField,
    PassFields,
    RgbColor,
)
from pkpass.models.metadata import Metadata
from pkpass.models.wire import dump_metadata, load_metadata, metadata_from_wire, metadata_to_wire

# Assets
from pkpass.models.assets import (
    AssetSlot,
    AssetTable,
    ImageSet,
    ImageSlot,
    ImageVariants,
    LocalizedAssets,
    StringsSlot,
)
from pkpass.models.locale import canonical_locale

# Entities
from pkpass.models.entities import Pass

__all__ = [
    "PkPassBaseModel",
    "BarcodeFormat",
    "DateStyle",
    "Density",
    "DetectorType",
    "ImageKind",
    "NumberStyle",
    "PassKind",
    "ReadStage",
    "RowBehaviour",
    "TextAlignment",
    "TransitType",
    "VerifyMode",
    "Barcode",
    "Beacon",
    "Location",
    "Nfc",
    "PassField",
    "PassFields",
    "RgbColor",
    "Metadata",
    "dump_metadata",
    "load_metadata",
    "metadata_from_wire",
    "metadata_to_wire",
    "AssetSlot",
    "AssetTable",
    "ImageSet",
    "ImageSlot",
    "ImageVariants",
    "LocalizedAssets",
    "StringsSlot",
    "canonical_locale",
    "Pass",
]
