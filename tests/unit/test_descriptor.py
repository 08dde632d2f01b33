import pytest

import chatui_hosting.descriptor as descriptor_module
from chatui_hosting.descriptor import build_resolver, compose_descriptor
from chatui_hosting.identity import IdentityStrategy
from chatui_hosting.parameters import SsmParameterResolver, StaticParameterResolver
from common.errors import ConfigurationMissing
from common.settings import HostingSettings
from common.stack_context import ArnScope
from stack_test_helpers import make_source_root

ARN_SCOPE = ArnScope(partition="aws", region="us-east-1", account="123456789012")
SCENARIO_PARAMETERS = {
    "/ns/pool_id": "p1",
    "/ns/client_id": "c1",
    "/ns/api": "https://api.example",
}


@pytest.fixture
def scenario_settings(tmp_path):
    return HostingSettings(
        parameter_namespace="/ns",
        environment_bindings={"POOL_ID": "pool_id", "CLIENT_ID": "client_id", "API_ENDPOINT": "api"},
        environment_literals={},
        source_root=str(make_source_root(tmp_path, "frontend/chat-app")),
        branches=[
            {"name": "main", "stage": "PRODUCTION"},
            {"name": "dev", "stage": "STAGING", "auto_delete": True},
        ],
    )


def compose(settings, parameters=SCENARIO_PARAMETERS):
    return compose_descriptor(settings, StaticParameterResolver(parameters, namespace="/ns"), ARN_SCOPE)


def test_resolved_keys_become_environment(scenario_settings):
    descriptor = compose(scenario_settings)

    assert descriptor.environment.variables == {
        "POOL_ID": "p1",
        "CLIENT_ID": "c1",
        "API_ENDPOINT": "https://api.example",
    }


def test_descriptor_aggregates_every_component(scenario_settings):
    descriptor = compose(scenario_settings)

    assert descriptor.identity.strategy is IdentityStrategy.DECLARE_NEW
    assert descriptor.source.repository_url == "https://github.com/Masterpitan/llm-assistant-project"
    assert descriptor.build_spec.working_directory == "frontend/chat-app"
    assert [b.name for b in descriptor.topology.branches] == ["main", "dev"]
    assert descriptor.platform == "WEB_COMPUTE"


def test_composition_is_deterministic(scenario_settings):
    assert compose(scenario_settings) == compose(scenario_settings)


def test_missing_key_fails_before_other_components(scenario_settings, monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("component built after a failed parameter read")

    monkeypatch.setattr(descriptor_module, "select_identity", unexpected)
    monkeypatch.setattr(descriptor_module, "SourceBinding", unexpected)
    monkeypatch.setattr(descriptor_module, "build_build_spec", unexpected)
    parameters = {k: v for k, v in SCENARIO_PARAMETERS.items() if k != "/ns/client_id"}

    with pytest.raises(ConfigurationMissing):
        compose(scenario_settings, parameters)


def test_build_resolver_prefers_overrides():
    settings = HostingSettings(parameter_overrides={"agent_api": "https://api.example"})

    assert isinstance(build_resolver(settings), StaticParameterResolver)
    assert isinstance(build_resolver(HostingSettings(), region="us-east-1"), SsmParameterResolver)
