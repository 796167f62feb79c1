"""Property-based tests for the manifest and the read stage machine."""

from __future__ import annotations

from collections import deque

from hypothesis import given
from hypothesis import strategies as st

from pkpass.archive.manifest import Manifest
from pkpass.archive.reader import VALID_TRANSITIONS, can_transition
from pkpass.models.enums import ReadStage

members = st.dictionaries(
    keys=st.text(min_size=1, max_size=30),
    values=st.binary(max_size=256),
    max_size=12,
)


class TestManifestProperties:
    """Every recorded member verifies; any other bytes do not."""

    @given(files=members)
    def test_recorded_members_verify(self, files: dict[str, bytes]) -> None:
        manifest = Manifest()
        for path, data in files.items():
            manifest.add_file(path, data)

        assert all(manifest.verify_file(path, data) for path, data in files.items())
        assert len(manifest) == len(files)

    @given(files=members, suffix=st.binary(min_size=1, max_size=8))
    def test_altered_members_fail(self, files: dict[str, bytes], suffix: bytes) -> None:
        manifest = Manifest()
        for path, data in files.items():
            manifest.add_file(path, data)

        assert not any(manifest.verify_file(path, data + suffix) for path, data in files.items())

    @given(files=members)
    def test_serialized_form_preserves_entries_and_order(self, files: dict[str, bytes]) -> None:
        manifest = Manifest()
        for path, data in files.items():
            manifest.add_file(path, data)

        parsed = Manifest.from_json_bytes(manifest.to_json_bytes())

        assert list(parsed) == list(files)
        assert parsed.as_dict() == manifest.as_dict()


def _reachable(start: ReadStage) -> set[ReadStage]:
    seen: set[ReadStage] = set()
    queue: deque[ReadStage] = deque([start])
    while queue:
        stage = queue.popleft()
        if stage in seen:
            continue
        seen.add(stage)
        queue.extend(VALID_TRANSITIONS.get(stage, set()) - seen)
    return seen


class TestReadStages:
    """Every stage leads to Done; Done leads nowhere."""

    @given(target=st.sampled_from(list(ReadStage)))
    def test_done_is_terminal(self, target: ReadStage) -> None:
        assert not can_transition(ReadStage.DONE, target)

    @given(stage=st.sampled_from(list(ReadStage)))
    def test_done_reachable(self, stage: ReadStage) -> None:
        assert ReadStage.DONE in _reachable(stage)
