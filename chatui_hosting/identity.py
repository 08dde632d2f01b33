from enum import Enum
from typing import Iterable, Optional

from attrs import define, field
from aws_cdk import aws_iam as iam
from constructs import Construct

import common.constants as constants
from common.errors import IdentityUnavailable, PolicyNotAllowed
from common.stack_context import ArnScope, StackContext

ALLOW = "Allow"
WILDCARDS = ("*", "?")


class IdentityStrategy(str, Enum):
    DECLARE_NEW = constants.IDENTITY_DECLARE_NEW
    REFERENCE_EXISTING = constants.IDENTITY_REFERENCE_EXISTING


class Capability(str, Enum):
    CONFIG_READ = "config-read"
    SECRET_READ = "secret-read"
    LOG_DELIVERY = "log-delivery"


@define(slots=True, frozen=True)
class PermissionStatement:
    actions: tuple[str, ...] = field(converter=tuple)
    resources: tuple[str, ...] = field(converter=tuple)
    effect: str = field(default=ALLOW)

    def to_policy_statement(self) -> iam.PolicyStatement:
        return iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=list(self.actions),
            resources=list(self.resources),
        )


@define(slots=True, frozen=True)
class AllowList:
    actions: frozenset[str] = field(converter=frozenset)
    resource_prefixes: tuple[str, ...] = field(converter=tuple)


@define(slots=True, frozen=True)
class ExecutionIdentity:
    strategy: IdentityStrategy
    service_principal: str = field(default=constants.AMPLIFY_SERVICE_PRINCIPAL)
    statements: tuple[PermissionStatement, ...] = field(default=(), converter=tuple)
    role_arn: Optional[str] = field(default=None)


def capability_statement(
    capability: Capability, arn_scope: ArnScope, namespace: str, secret_name: str
) -> PermissionStatement:
    if capability is Capability.CONFIG_READ:
        return PermissionStatement(
            actions=constants.SSM_READ_ACTIONS,
            resources=[arn_scope.parameter_namespace_prefix(namespace) + "*"],
        )
    if capability is Capability.SECRET_READ:
        return PermissionStatement(
            actions=constants.SECRET_READ_ACTIONS,
            resources=[arn_scope.secret_prefix(secret_name) + constants.SECRET_ARN_SUFFIX],
        )
    return PermissionStatement(
        actions=constants.LOG_DELIVERY_ACTIONS,
        resources=[arn_scope.amplify_log_group_prefix() + "*"],
    )


def build_allow_list(
    capabilities: Iterable[Capability],
    arn_scope: ArnScope,
    namespace: str,
    secret_name: str,
) -> AllowList:
    actions: set[str] = set()
    prefixes: list[str] = []
    for capability in capabilities:
        if capability is Capability.CONFIG_READ:
            actions.update(constants.SSM_READ_ACTIONS)
            prefixes.append(arn_scope.parameter_namespace_prefix(namespace))
        elif capability is Capability.SECRET_READ:
            actions.update(constants.SECRET_READ_ACTIONS)
            prefixes.append(arn_scope.secret_prefix(secret_name))
        elif capability is Capability.LOG_DELIVERY:
            actions.update(constants.LOG_DELIVERY_ACTIONS)
            prefixes.append(arn_scope.amplify_log_group_prefix())
    return AllowList(actions=actions, resource_prefixes=prefixes)


def validate_statement(statement: PermissionStatement, allow_list: AllowList) -> None:
    """Reject anything broader than the enumerated capability set.

    Wildcards may only form the tail of a resource pattern whose fixed part
    starts with one of the allowed prefixes; actions never carry wildcards.
    """
    details = {"actions": list(statement.actions), "resources": list(statement.resources)}
    if statement.effect != ALLOW:
        raise PolicyNotAllowed(
            f"Only {ALLOW} statements may be granted, got {statement.effect}",
            details=details,
        )
    if not statement.actions or not statement.resources:
        raise PolicyNotAllowed("Statement needs at least one action and resource", details=details)
    for action in statement.actions:
        if any(w in action for w in WILDCARDS) or action not in allow_list.actions:
            raise PolicyNotAllowed(f"Action {action} is not in the allow-list", details=details)
    for resource in statement.resources:
        stem = resource.rstrip("".join(WILDCARDS))
        if any(w in stem for w in WILDCARDS):
            raise PolicyNotAllowed(
                f"Resource {resource} may only use a trailing wildcard", details=details
            )
        if not any(stem.startswith(p) for p in allow_list.resource_prefixes):
            raise PolicyNotAllowed(
                f"Resource {resource} is outside the allowed namespaces", details=details
            )


def declare_identity(
    arn_scope: ArnScope,
    namespace: str,
    secret_name: str,
    grant_log_delivery: bool = False,
    extra_statements: Iterable[PermissionStatement] = (),
) -> ExecutionIdentity:
    capabilities = [Capability.CONFIG_READ, Capability.SECRET_READ]
    if grant_log_delivery:
        capabilities.append(Capability.LOG_DELIVERY)
    allow_list = build_allow_list(capabilities, arn_scope, namespace, secret_name)
    statements = [
        capability_statement(c, arn_scope, namespace, secret_name) for c in capabilities
    ]
    statements.extend(extra_statements)
    for statement in statements:
        validate_statement(statement, allow_list)
    return ExecutionIdentity(strategy=IdentityStrategy.DECLARE_NEW, statements=statements)


def reference_identity(role_arn: Optional[str]) -> ExecutionIdentity:
    if not role_arn or ":iam::" not in role_arn or ":role/" not in role_arn:
        raise IdentityUnavailable(
            "reference-existing identity needs an IAM role ARN",
            details={"role_arn": role_arn},
        )
    return ExecutionIdentity(strategy=IdentityStrategy.REFERENCE_EXISTING, role_arn=role_arn)


def bind_identity(
    scope: Construct, context: StackContext, identity: ExecutionIdentity
) -> iam.IRole:
    """Create or import the role Amplify assumes during builds."""
    if identity.strategy is IdentityStrategy.REFERENCE_EXISTING:
        # Owned out-of-band; never attach policies to it.
        return iam.Role.from_role_arn(
            scope,
            context.build_resource_id("Role", action="build"),
            role_arn=identity.role_arn,
            mutable=False,
        )

    role = iam.Role(
        scope,
        context.build_resource_id("Role", action="build"),
        role_name=context.build_resource_name("Role", action="build"),
        assumed_by=iam.ServicePrincipal(identity.service_principal),
        description="Role for Amplify to use during builds",
    )
    for statement in identity.statements:
        role.add_to_policy(statement.to_policy_statement())
    return role
