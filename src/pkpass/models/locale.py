"""Language tags for ``<locale>.lproj`` directories.

Tags are validated against the IANA subtag registry and spelled the way
BCP 47 recommends, both via ``langcodes``. Directory names may separate
subtags with ``_`` as well as ``-``; the canonical form uses ``-``.

Example:
    >>> canonical_locale("en_us")
    'en-US'
    >>> canonical_locale("zh-hant-tw")
    'zh-Hant-TW'
"""

from __future__ import annotations

import langcodes


def canonical_locale(tag: str) -> str:
    """Validate a language tag and return its canonical spelling.

    Deprecated subtags are replaced (``iw`` becomes ``he``) and a script
    implied by the language is dropped (``en-Latn`` becomes ``en``).

    Raises:
        ValueError: If ``tag`` is not a valid language tag
    """
    normalized = tag.replace("_", "-")
    if not langcodes.tag_is_valid(normalized):
        raise ValueError(f"invalid language tag {tag!r}")
    return langcodes.standardize_tag(normalized)
