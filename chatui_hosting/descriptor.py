import os
from typing import Optional

from attrs import define, field
from aws_lambda_powertools import Logger

import common.constants as constants
from chatui_hosting.build_spec import BuildSpec, build_build_spec, discover_working_directory
from chatui_hosting.environment import EnvironmentMap, inject_environment
from chatui_hosting.identity import (
    ExecutionIdentity,
    IdentityStrategy,
    declare_identity,
    reference_identity,
)
from chatui_hosting.parameters import (
    ParameterResolver,
    SsmParameterResolver,
    StaticParameterResolver,
)
from chatui_hosting.release import ReleaseTopology, build_release_topology
from chatui_hosting.source import SourceBinding
from common.settings import HostingSettings
from common.stack_context import ArnScope

logger = Logger(service="chatui-hosting", level=os.getenv("LOG_LEVEL", "INFO").upper())


@define(slots=True, frozen=True)
class ApplicationDescriptor:
    app_name: str
    identity: ExecutionIdentity
    source: SourceBinding
    build_spec: BuildSpec
    environment: EnvironmentMap
    topology: ReleaseTopology
    platform: str = field(default=constants.PLATFORM)
    description: str = field(default=constants.APP_DESCRIPTION)


def build_resolver(settings: HostingSettings, region: Optional[str] = None) -> ParameterResolver:
    if settings.parameter_overrides is not None:
        return StaticParameterResolver(
            settings.parameter_overrides, namespace=settings.parameter_namespace
        )
    return SsmParameterResolver(namespace=settings.parameter_namespace, region=region)


def select_identity(settings: HostingSettings, arn_scope: ArnScope) -> ExecutionIdentity:
    strategy = IdentityStrategy(settings.identity_strategy)
    if strategy is IdentityStrategy.REFERENCE_EXISTING:
        return reference_identity(settings.existing_role_arn)
    return declare_identity(
        arn_scope,
        namespace=settings.parameter_namespace,
        secret_name=settings.secret_name,
        grant_log_delivery=settings.grant_log_delivery,
    )


def compose_descriptor(
    settings: HostingSettings, resolver: ParameterResolver, arn_scope: ArnScope
) -> ApplicationDescriptor:
    """Evaluate the whole descriptor in dependency order.

    Parameters are read first so a missing key aborts before any identity,
    source or build object exists. Nothing here creates constructs.
    """
    resolved = resolver.resolve_all(settings.environment_bindings.values())

    identity = select_identity(settings, arn_scope)
    source = SourceBinding(
        owner=settings.repository_owner,
        repository=settings.repository_name,
        secret_name=settings.secret_name,
    )

    selection = discover_working_directory(settings.candidate_directories, settings.source_root)
    build_spec = build_build_spec(
        selection,
        install_command=settings.install_command,
        build_command=settings.build_command,
        artifact_directory=settings.artifact_directory,
        artifact_files=settings.artifact_files,
        cache_paths=settings.cache_paths,
    )
    environment = inject_environment(
        settings.environment_bindings,
        resolved,
        literals=settings.environment_literals,
        aliases=settings.environment_aliases,
    )

    topology = build_release_topology(settings.branches, settings.auto_branch_deletion)

    logger.info(
        "Composed application descriptor",
        app_name=settings.app_name,
        identity_strategy=identity.strategy.value,
        working_directory=build_spec.working_directory,
        branches=[branch.name for branch in topology.branches],
    )
    return ApplicationDescriptor(
        app_name=settings.app_name,
        identity=identity,
        source=source,
        build_spec=build_spec,
        environment=environment,
        topology=topology,
    )
