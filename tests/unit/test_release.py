import pytest

from chatui_hosting.release import (
    PromotionStage,
    ReleaseBranch,
    build_release_topology,
    parse_release_branch,
)
from common.errors import InvalidReleaseTopology


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("main", ReleaseBranch(name="main", stage=PromotionStage.PRODUCTION)),
        ("dev:staging", ReleaseBranch(name="dev", stage=PromotionStage.STAGING)),
        (
            {"name": "dev", "stage": "STAGING", "auto_delete": True},
            ReleaseBranch(name="dev", stage=PromotionStage.STAGING, auto_delete=True),
        ),
        (
            {"name": "dev", "auto_build": "false", "auto_delete": "false"},
            ReleaseBranch(name="dev", auto_build=False, auto_delete=False),
        ),
        (
            {"name": "dev", "auto_build": "0", "auto_delete": "true"},
            ReleaseBranch(name="dev", auto_build=False, auto_delete=True),
        ),
    ],
    ids=["name_only", "name_and_stage", "mapping", "string_false", "string_flags"],
)
def test_parse_release_branch(raw, expected):
    assert parse_release_branch(raw) == expected


def test_staging_maps_to_amplify_beta():
    assert PromotionStage.STAGING.amplify_stage == "BETA"
    assert PromotionStage.PRODUCTION.amplify_stage == "PRODUCTION"


def test_unknown_stage():
    with pytest.raises(ValueError):
        ReleaseBranch(name="main", stage="CANARY")


def test_auto_deletion_switch():
    assert build_release_topology(["main"], auto_branch_deletion=True).enable_branch_auto_deletion
    assert not build_release_topology(["main"]).enable_branch_auto_deletion
    assert build_release_topology(
        ["main", {"name": "dev", "stage": "STAGING", "auto_delete": True}]
    ).enable_branch_auto_deletion


@pytest.mark.parametrize(
    "branches",
    [[], ["main", "main:BETA"], ["feature-a", "feature_a"], ["release/1.0", "Release-10"]],
    ids=["empty", "duplicate", "separator_collision", "case_collision"],
)
def test_invalid_topology(branches):
    with pytest.raises(InvalidReleaseTopology):
        build_release_topology(branches)


def test_construct_suffix_strips_separators():
    assert ReleaseBranch(name="feature/Login-Page").construct_suffix == "featureloginpage"


def test_construct_id_collision_names_both_branches():
    with pytest.raises(InvalidReleaseTopology) as error:
        build_release_topology(["main", "feature-a", "feature_a"])
    assert error.value.details["branches"] == [["feature-a", "feature_a"]]
