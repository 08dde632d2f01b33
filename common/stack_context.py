from attrs import define, field
from aws_cdk import Stack
from typing import Optional

import common.constants as constants
from common.errors import PolicyNotAllowed


@define(slots=True, frozen=True)
class ArnScope:
    """Partition, region and account that every granted ARN must live in."""

    partition: str
    region: str
    account: str

    def parameter_namespace_prefix(self, namespace: str) -> str:
        """ARN prefix of one parameter namespace; the store root is never grantable."""
        scoped = namespace.strip().rstrip("/")
        if not scoped or any(w in scoped for w in ("*", "?")):
            raise PolicyNotAllowed(
                f"Parameter namespace {namespace!r} does not name a single namespace",
                details={"namespace": namespace},
            )
        return constants.SSM_PARAMETER_ARN.format(
            partition=self.partition,
            region=self.region,
            account=self.account,
            namespace=scoped if scoped.startswith("/") else f"/{scoped}",
        )

    def secret_prefix(self, secret_name: str) -> str:
        if not secret_name.strip() or any(w in secret_name for w in ("*", "?")):
            raise PolicyNotAllowed(
                f"Secret name {secret_name!r} does not name a single secret",
                details={"secret": secret_name},
            )
        return constants.SECRET_ARN.format(
            partition=self.partition,
            region=self.region,
            account=self.account,
            secret_name=secret_name,
        )

    def amplify_log_group_prefix(self) -> str:
        return constants.AMPLIFY_LOG_GROUP_ARN.format(
            partition=self.partition, region=self.region, account=self.account
        )


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    env: str = field(
        default=constants.DEFAULT_ENV,
        metadata={"description": "Deployment environment (dev, staging, prod)"},
    )
    service: str = field(default=constants.SERVICE_NAME, init=False)
    domain: str = field(default=constants.DOMAIN)
    component: str = field(default=constants.COMPONENT)

    @property
    def aws_account_id(self) -> str:
        return Stack.of(self.scope).account

    @property
    def aws_region(self) -> str:
        return Stack.of(self.scope).region

    @property
    def aws_partition(self) -> str:
        return Stack.of(self.scope).partition

    def build_arn_scope(self) -> ArnScope:
        if not self.aws_region:
            raise ValueError("AWS region is not set, unable to scope granted ARNs")
        return ArnScope(
            partition=self.aws_partition,
            region=self.aws_region,
            account=self.aws_account_id,
        )

    # ---------- naming ----------
    def build_resource_name(
        self, resource_type: str, action: Optional[str] = None
    ) -> str:
        """Build resource name with optional action.

        Examples:
            - Without action: chatui-frontend-hosting-role-dev
            - With action: chatui-frontend-hosting-build-role-dev
        """
        if action:
            return f"{self.service}-{self.domain}-{self.component}-{action}-{resource_type}-{self.env}".lower()
        return f"{self.service}-{self.domain}-{self.component}-{resource_type}-{self.env}".lower()

    def build_resource_id(self, resource_type: str, action: Optional[str] = None) -> str:
        """Build resource ID with optional action.

        Examples:
            - Without action: ChatuiFrontendHostingApp
            - With action: ChatuiFrontendHostingBuildRole
        """
        if action:
            return (
                f"{self.service.capitalize()}"
                f"{self.domain.capitalize()}"
                f"{self.component.capitalize()}"
                f"{action.capitalize()}"
                f"{resource_type.capitalize()}"
            )
        return (
            f"{self.service.capitalize()}"
            f"{self.domain.capitalize()}"
            f"{self.component.capitalize()}"
            f"{resource_type.capitalize()}"
        )
