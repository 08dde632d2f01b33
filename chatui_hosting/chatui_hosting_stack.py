from typing import Optional

from aws_cdk import (
    CfnOutput,
    Stack,
    Token,
    aws_amplify as amplify,
    aws_iam as iam,
)
from constructs import Construct

from chatui_hosting.descriptor import ApplicationDescriptor, build_resolver, compose_descriptor
from chatui_hosting.identity import IdentityStrategy, bind_identity
from chatui_hosting.parameters import ParameterResolver
from chatui_hosting.release import attach_branches
from common.settings import HostingSettings
from common.stack_context import StackContext


class ChatUiHostingStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: Optional[HostingSettings] = None,
        resolver: Optional[ParameterResolver] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.settings = settings or HostingSettings.from_context(self.node)
        self.context = StackContext(scope=self, env=self.settings.env)

        region = None if Token.is_unresolved(self.region) else self.region
        resolver = resolver or build_resolver(self.settings, region=region)

        # Fully evaluated before the first construct is added
        self.descriptor = compose_descriptor(
            self.settings, resolver, self.context.build_arn_scope()
        )

        self.build_role = bind_identity(self, self.context, self.descriptor.identity)
        self.amplify_app = self._build_amplify_app(self.descriptor, self.build_role)
        self.branches = attach_branches(
            self, self.context, self.amplify_app, self.descriptor.topology
        )
        self._export_outputs()

    def _build_amplify_app(
        self, descriptor: ApplicationDescriptor, role: iam.IRole
    ) -> amplify.CfnApp:
        """Amplify app sourced from GitHub with server side rendering enabled."""
        app = amplify.CfnApp(
            self,
            self.context.build_resource_id("App"),
            name=descriptor.app_name,
            description=descriptor.description,
            repository=descriptor.source.repository_url,
            access_token=descriptor.source.access_token(),
            iam_service_role=role.role_arn,
            platform=descriptor.platform,
            build_spec=descriptor.build_spec.to_yaml(),
            enable_branch_auto_deletion=descriptor.topology.enable_branch_auto_deletion,
            environment_variables=descriptor.environment.to_amplify_properties(),
        )
        if descriptor.identity.strategy is IdentityStrategy.DECLARE_NEW:
            # Builds must not start before the role's policy is attached
            app.node.add_dependency(role)
        return app

    def _export_outputs(self) -> None:
        domain = self.amplify_app.attr_default_domain
        CfnOutput(
            self,
            "AmplifyAppURL",
            value=domain,
            export_name=self.context.build_resource_name("domain"),
        )
        CfnOutput(
            self,
            "AmplifyAppId",
            value=self.amplify_app.attr_app_id,
            export_name=self.context.build_resource_name("app-id"),
        )
        for branch in self.descriptor.topology.branches:
            CfnOutput(
                self,
                f"{branch.construct_suffix.capitalize()}BranchURL",
                value=f"https://{branch.name.replace('/', '-')}.{domain}",
            )
