import re
from enum import Enum
from typing import Any, Iterable, Union

from attrs import define, field
from attrs.validators import instance_of, min_len
from aws_cdk import CfnTag, aws_amplify as amplify
from constructs import Construct

import common.constants as constants
from common.errors import InvalidReleaseTopology
from common.settings import as_bool
from common.stack_context import StackContext


class PromotionStage(str, Enum):
    PRODUCTION = "PRODUCTION"
    STAGING = "STAGING"
    BETA = "BETA"
    DEVELOPMENT = "DEVELOPMENT"
    EXPERIMENTAL = "EXPERIMENTAL"
    PULL_REQUEST = "PULL_REQUEST"

    @property
    def amplify_stage(self) -> str:
        # Amplify has no STAGING stage; BETA is its pre-production slot.
        if self is PromotionStage.STAGING:
            return PromotionStage.BETA.value
        return self.value


def _to_stage(stage: Union[str, PromotionStage]) -> PromotionStage:
    if isinstance(stage, PromotionStage):
        return stage
    return PromotionStage(stage.upper())


@define(slots=True, frozen=True)
class ReleaseBranch:
    name: str = field(validator=[instance_of(str), min_len(1)])
    stage: PromotionStage = field(
        default=PromotionStage.PRODUCTION, converter=_to_stage
    )
    auto_build: bool = field(default=True)
    auto_delete: bool = field(default=False)

    @property
    def construct_suffix(self) -> str:
        return re.sub(r"[^a-z0-9]", "", self.name.lower())


def _unique_branches(instance: Any, attribute: Any, branches: tuple) -> None:
    if not branches:
        raise InvalidReleaseTopology("At least one release branch must be declared")
    names = [branch.name for branch in branches]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise InvalidReleaseTopology(
            f"Release branches declared more than once: {', '.join(duplicates)}",
            details={"branches": duplicates},
        )
    suffixes: dict[str, list[str]] = {}
    for branch in branches:
        suffixes.setdefault(branch.construct_suffix, []).append(branch.name)
    clashing = sorted(tuple(group) for group in suffixes.values() if len(group) > 1)
    if clashing:
        raise InvalidReleaseTopology(
            "Release branches collapse to the same construct id: "
            + "; ".join(", ".join(group) for group in clashing),
            details={"branches": [list(group) for group in clashing]},
        )


@define(slots=True, frozen=True)
class ReleaseTopology:
    branches: tuple[ReleaseBranch, ...] = field(converter=tuple, validator=_unique_branches)
    auto_branch_deletion: bool = field(default=False)

    @property
    def enable_branch_auto_deletion(self) -> bool:
        """Disconnect environments whose git branch was deleted."""
        return self.auto_branch_deletion or any(b.auto_delete for b in self.branches)


def parse_release_branch(raw: Union[str, dict, ReleaseBranch]) -> ReleaseBranch:
    """Accept ``"main"``, ``"dev:STAGING"`` or a mapping from cdk context."""
    if isinstance(raw, ReleaseBranch):
        return raw
    if isinstance(raw, str):
        name, _, stage = raw.partition(":")
        return ReleaseBranch(name=name, stage=stage or constants.DEFAULT_STAGE)
    return ReleaseBranch(
        name=raw["name"],
        stage=raw.get("stage", constants.DEFAULT_STAGE),
        auto_build=as_bool(raw.get("auto_build"), True),
        auto_delete=as_bool(raw.get("auto_delete"), False),
    )


def build_release_topology(
    branches: Iterable[Union[str, dict, ReleaseBranch]], auto_branch_deletion: bool = False
) -> ReleaseTopology:
    return ReleaseTopology(
        branches=[parse_release_branch(branch) for branch in branches],
        auto_branch_deletion=auto_branch_deletion,
    )


def attach_branches(
    scope: Construct,
    context: StackContext,
    app: amplify.CfnApp,
    topology: ReleaseTopology,
) -> dict[str, amplify.CfnBranch]:
    """One release environment per declared branch.

    Branches carry no build spec or environment of their own so each one
    inherits the app-level definitions.
    """
    cfn_branches = {}
    for branch in topology.branches:
        cfn_branches[branch.name] = amplify.CfnBranch(
            scope,
            context.build_resource_id("Branch", action=branch.construct_suffix),
            app_id=app.attr_app_id,
            branch_name=branch.name,
            stage=branch.stage.amplify_stage,
            enable_auto_build=branch.auto_build,
            tags=[CfnTag(key=constants.PROMOTION_STAGE_TAG, value=branch.stage.value)],
        )
    return cfn_branches
