from typing import Mapping, Optional

from attrs import define, field
from aws_cdk import aws_amplify as amplify

import common.constants as constants
from chatui_hosting.parameters import ConfigValue
from common.errors import ConfigurationMissing, SecretMaterialInEnvironment


@define(slots=True, frozen=True)
class EnvironmentMap:
    """Flat environment shared by the build phases and the SSR runtime.

    Variable names are a versioned contract with the hosted application;
    renaming one is a breaking change and goes through ``aliases``.
    """

    variables: dict[str, str] = field(factory=dict)
    version: str = field(default=constants.ENVIRONMENT_CONTRACT_VERSION)

    def to_amplify_properties(self) -> list[amplify.CfnApp.EnvironmentVariableProperty]:
        return [
            amplify.CfnApp.EnvironmentVariableProperty(name=name, value=value)
            for name, value in sorted(self.variables.items())
        ]


def _guard_entry(name: str, value: str, secure: bool = False) -> None:
    if secure:
        raise SecretMaterialInEnvironment(
            f"{name} is bound to a SecureString parameter", details={"variable": name}
        )
    if constants.SECRET_REFERENCE_PREFIX in value:
        raise SecretMaterialInEnvironment(
            f"{name} carries a secrets manager reference", details={"variable": name}
        )
    if any(part in constants.SECRET_NAME_MARKERS for part in name.upper().split("_")):
        raise SecretMaterialInEnvironment(
            f"{name} looks like a credential and cannot be injected",
            details={"variable": name},
        )


def inject_environment(
    bindings: Mapping[str, str],
    resolved: Mapping[str, ConfigValue],
    literals: Optional[Mapping[str, str]] = None,
    aliases: Optional[Mapping[str, str]] = None,
) -> EnvironmentMap:
    """Merge literals and resolved parameters into one environment map.

    ``bindings`` maps variable name to parameter key, ``aliases`` maps a
    legacy variable name to the canonical name whose value it mirrors.
    """
    variables: dict[str, str] = {}
    for name, value in (literals or {}).items():
        _guard_entry(name, value)
        variables[name] = value

    for name, key in bindings.items():
        config_value = resolved.get(key)
        if config_value is None:
            raise ConfigurationMissing(
                f"{name} is bound to unresolved parameter {key}",
                details={"variable": name, "parameter": key},
            )
        _guard_entry(name, config_value.value, config_value.secure)
        variables[name] = config_value.value

    for legacy_name, canonical_name in (aliases or {}).items():
        if canonical_name not in variables:
            raise ConfigurationMissing(
                f"Alias {legacy_name} points at undefined variable {canonical_name}",
                details={"variable": legacy_name, "target": canonical_name},
            )
        _guard_entry(legacy_name, variables[canonical_name])
        variables[legacy_name] = variables[canonical_name]

    return EnvironmentMap(variables=variables)
