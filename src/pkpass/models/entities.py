"""The Pass aggregate: metadata plus the assets it owns."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pkpass.models.assets import AssetTable
from pkpass.models.enums import VerifyMode
from pkpass.models.metadata import Metadata

if TYPE_CHECKING:
    from pkpass.crypto.identity import SigningIdentity
    from pkpass.crypto.trust import Verifier


@dataclass
class Pass:
    """One pass: ``pass.json`` metadata and its asset table.

    Example:
        >>> pass_ = Pass.new(organization_name="Acme", description="d", serial_number="1")
        >>> pass_.assets.icon.standard = b"ABC"
        >>> data = pass_.write(SigningIdentity.no_signature())
    """

    metadata: Metadata
    assets: AssetTable = field(default_factory=AssetTable)

    @classmethod
    def new(cls, **metadata: Any) -> Pass:
        """Empty pass built from Metadata keyword arguments."""
        return cls(metadata=Metadata(**metadata))

    @classmethod
    def read(
        cls,
        data: bytes,
        policy: VerifyMode | str = VerifyMode.VERIFY,
        *,
        verifier: Verifier | None = None,
        require_signature: bool = False,
    ) -> Pass:
        from pkpass.archive.reader import read_pass

        return read_pass(data, policy, verifier=verifier, require_signature=require_signature)

    @classmethod
    def read_from(
        cls,
        path: str | Path,
        policy: VerifyMode | str = VerifyMode.VERIFY,
        *,
        verifier: Verifier | None = None,
        require_signature: bool = False,
    ) -> Pass:
        from pkpass.archive.reader import read_pass_from_path

        return read_pass_from_path(
            path, policy, verifier=verifier, require_signature=require_signature
        )

    def write(self, identity: SigningIdentity) -> bytes:
        from pkpass.archive.writer import write_pass

        return write_pass(self, identity)

    def write_to(self, identity: SigningIdentity, path: str | Path) -> Path:
        """Write atomically to ``path``."""
        from pkpass.archive.writer import write_pass_to_path

        return write_pass_to_path(self, identity, path)
