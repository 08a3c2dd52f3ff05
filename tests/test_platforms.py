"""Platform variants: abstract base, policy section per platform, artifact check."""

from __future__ import annotations

import pytest

from prebuild_scheduler.catalog import parse_library_policy
from prebuild_scheduler.core.types import BuildCandidate
from prebuild_scheduler.platforms import AndroidPlatform, IosPlatform, Platform

from tests.fakes.providers import FakeArtifactStore

POLICY = parse_library_policy("lib", {"versionMatcher": "1.*", "android": False})


def test_base_class_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Platform("wf.yml")


def test_subclass_without_policy_section_is_abstract():
    class Incomplete(Platform):
        name = "other"

    with pytest.raises(TypeError):
        Incomplete("wf.yml")


def test_platform_policy_sections():
    assert not AndroidPlatform("android.yml").is_enabled(POLICY)
    assert AndroidPlatform("android.yml").overrides(POLICY) == ()
    assert IosPlatform("ios.yml").is_enabled(POLICY)
    assert len(IosPlatform("ios.yml").overrides(POLICY)) == 1


def test_artifact_check():
    store = FakeArtifactStore()
    store.add("lib", "1.0.0", "0.81.0")
    built = BuildCandidate("lib", "1.0.0", "android", "0.81.0")
    assert AndroidPlatform("android.yml", artifact_store=store).is_built(built)
    assert not AndroidPlatform("android.yml").is_built(built)
    assert not IosPlatform("ios.yml").is_built(BuildCandidate("lib", "1.0.0", "ios", "0.81.0"))
