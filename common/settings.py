import json
from typing import Any, Optional

from attrs import define, field, fields
from attrs.validators import in_, instance_of
from constructs import Node

import common.constants as constants

IDENTITY_STRATEGIES = (constants.IDENTITY_DECLARE_NEW, constants.IDENTITY_REFERENCE_EXISTING)


def as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


def _as_tuple(value: Any) -> tuple:
    # -c key=a,b arrives as a plain string, cdk.json as a list
    if isinstance(value, str):
        if value.startswith("["):
            return tuple(json.loads(value))
        return tuple(item.strip() for item in value.split(",") if item.strip())
    return tuple(value)


def _as_dict(value: Any) -> dict:
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


@define(slots=True, frozen=True)
class HostingSettings:
    """Inputs of one descriptor evaluation, read from cdk context."""

    env: str = field(default=constants.DEFAULT_ENV)
    app_name: str = field(default=constants.APP_NAME)
    parameter_namespace: str = field(default=constants.PARAMETER_NAMESPACE)
    environment_bindings: dict = field(
        factory=lambda: dict(constants.ENVIRONMENT_BINDINGS), converter=_as_dict
    )
    environment_literals: dict = field(
        factory=lambda: dict(constants.ENVIRONMENT_LITERALS), converter=_as_dict
    )
    environment_aliases: dict = field(factory=dict, converter=_as_dict)
    secret_name: str = field(default=constants.SOURCE_TOKEN_SECRET_NAME)
    repository_owner: str = field(default=constants.REPOSITORY_OWNER)
    repository_name: str = field(default=constants.REPOSITORY_NAME)
    identity_strategy: str = field(
        default=constants.IDENTITY_DECLARE_NEW, validator=in_(IDENTITY_STRATEGIES)
    )
    existing_role_arn: Optional[str] = field(default=None)
    grant_log_delivery: bool = field(default=False)
    candidate_directories: tuple = field(
        default=constants.CANDIDATE_WORKING_DIRECTORIES, converter=_as_tuple
    )
    source_root: str = field(default=constants.SOURCE_ROOT, validator=instance_of(str))
    install_command: str = field(default=constants.INSTALL_COMMAND)
    build_command: str = field(default=constants.BUILD_COMMAND)
    artifact_directory: str = field(default=constants.ARTIFACT_DIRECTORY)
    artifact_files: tuple = field(default=constants.ARTIFACT_FILES, converter=_as_tuple)
    cache_paths: tuple = field(default=constants.CACHE_PATHS, converter=_as_tuple)
    branches: tuple = field(default=(constants.DEFAULT_BRANCH,), converter=_as_tuple)
    auto_branch_deletion: bool = field(default=True)
    parameter_overrides: Optional[dict] = field(default=None)

    @classmethod
    def from_context(cls, node: Node) -> "HostingSettings":
        """Build settings from cdk.json / ``-c key=value``; unset keys keep defaults."""
        values: dict[str, Any] = {}
        for attribute in fields(cls):
            raw = node.try_get_context(attribute.name)
            if raw is not None:
                values[attribute.name] = raw

        for name, default in (("grant_log_delivery", False), ("auto_branch_deletion", True)):
            values[name] = as_bool(values.get(name), default)
        if values.get("parameter_overrides") is not None:
            values["parameter_overrides"] = _as_dict(values["parameter_overrides"])
        return cls(**values)
