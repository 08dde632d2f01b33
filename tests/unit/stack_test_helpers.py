from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional
from aws_cdk.assertions import Template
from aws_cdk import App
import pytest

from chatui_hosting.chatui_hosting_stack import ChatUiHostingStack
from chatui_hosting.parameters import ParameterResolver, StaticParameterResolver
from common.settings import HostingSettings

PARAMETERS = {
    "/AgenticLLMAssistantWorkshop/cognito_user_pool_id": "us-east-1_pool",
    "/AgenticLLMAssistantWorkshop/cognito_user_pool_client_id": "client123",
    "/AgenticLLMAssistantWorkshop/agent_api": "https://api.example/prod/",
}


# ------------------- Test Case Data Classes -------------------
@dataclass(frozen=True)
class EnvironmentVariableTestCase:
    id: str
    name: str
    value: str


@dataclass(frozen=True)
class BranchTestCase:
    id: str
    branch_name: str
    amplify_stage: str
    promotion_stage: str


# ------------------- Helper Functions -------------------


def find_resources_by_type(
    template: Template, resource_type: str, props: Optional[dict] = None
) -> Mapping[str, Any]:

    return template.find_resources(resource_type, props=props)


def get_single_resource_id(
    resources: Mapping[str, Any], resource_type: str = "resource"
) -> str:
    assert len(resources) == 1, f"expected exactly one {resource_type}"
    return next(iter(resources))


def flatten_intrinsic(value: Any) -> str:
    """Render Fn::Join / Ref values as a single string, e.g. arn:${AWS::Partition}:..."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and "Fn::Join" in value:
        separator, parts = value["Fn::Join"]
        return separator.join(flatten_intrinsic(part) for part in parts)
    if isinstance(value, Mapping) and "Ref" in value:
        return "${" + value["Ref"] + "}"
    return str(value)


def make_source_root(root: Path, *directories: str) -> Path:
    for directory in directories:
        (root / directory).mkdir(parents=True, exist_ok=True)
    return root


def build_settings(source_root: Path, **overrides) -> HostingSettings:
    return HostingSettings(source_root=str(source_root), **overrides)


def build_stack(
    settings: HostingSettings,
    resolver: Optional[ParameterResolver] = None,
    stack_id: str = "TestChatUiHostingStack",
) -> ChatUiHostingStack:
    app = App()
    return ChatUiHostingStack(
        app,
        stack_id,
        settings=settings,
        resolver=resolver or StaticParameterResolver(PARAMETERS),
    )


def build_template(settings: HostingSettings, resolver: Optional[ParameterResolver] = None):
    return Template.from_stack(build_stack(settings, resolver))


# ------------------- Pytest Fixtures -------------------


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    return make_source_root(tmp_path, "frontend/chat-app")


@pytest.fixture
def settings(source_root: Path) -> HostingSettings:
    return build_settings(source_root)


@pytest.fixture
def template(settings: HostingSettings) -> Template:
    return build_template(settings)


@pytest.fixture
def json_template(template: Template) -> Mapping[str, Any]:
    return template.to_json()
