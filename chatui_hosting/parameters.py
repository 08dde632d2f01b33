import os
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional

import boto3
from attrs import define, field
from attrs.validators import instance_of
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

import common.constants as constants
from common.errors import ConfigurationMissing, PermissionDenied

logger = Logger(service="chatui-hosting", level=os.getenv("LOG_LEVEL", "INFO").upper())

NOT_FOUND_CODES = ("ParameterNotFound", "ParameterVersionNotFound")
ACCESS_DENIED_CODES = ("AccessDeniedException", "AccessDenied")


@define(slots=True, frozen=True)
class ConfigValue:
    key: str = field(validator=instance_of(str))
    value: str = field(validator=instance_of(str))
    secure: bool = field(default=False, validator=instance_of(bool))


def qualify_key(key: str, namespace: str) -> str:
    """Root a relative key under the namespace, e.g. agent_api -> /Ns/agent_api."""
    if key.startswith("/"):
        return key
    return f"{namespace.rstrip('/')}/{key}"


class ParameterResolver(ABC):
    """Reads named values from the shared parameter store.

    Values are read once per descriptor evaluation and baked into the
    template. There is no retry: a failed read aborts composition.
    """

    def __init__(self, namespace: str = constants.PARAMETER_NAMESPACE) -> None:
        self.namespace = namespace

    @abstractmethod
    def _fetch(self, key: str) -> ConfigValue:
        ...

    def resolve(self, key: str) -> ConfigValue:
        qualified = qualify_key(key, self.namespace)
        config_value = self._fetch(qualified)
        logger.info("Resolved configuration parameter", parameter=qualified)
        return config_value

    def resolve_all(self, keys: Iterable[str]) -> dict[str, ConfigValue]:
        resolved: dict[str, ConfigValue] = {}
        for key in keys:
            if key not in resolved:
                resolved[key] = self.resolve(key)
        return resolved


class SsmParameterResolver(ParameterResolver):

    def __init__(
        self,
        namespace: str = constants.PARAMETER_NAMESPACE,
        client: Optional[Any] = None,
        region: Optional[str] = None,
    ) -> None:
        super().__init__(namespace)
        self._client = client
        self._region = region

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("ssm", region_name=self._region)
        return self._client

    def _fetch(self, key: str) -> ConfigValue:
        try:
            response = self.client.get_parameter(Name=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            details = {"parameter": key, "code": code}
            if code in NOT_FOUND_CODES:
                logger.error("Configuration parameter not found", parameter=key)
                raise ConfigurationMissing(
                    f"Parameter {key} does not exist", details=details
                ) from e
            if code in ACCESS_DENIED_CODES:
                logger.error("Access denied reading parameter", parameter=key)
                raise PermissionDenied(
                    f"Not allowed to read parameter {key}", details=details
                ) from e
            raise
        parameter = response["Parameter"]
        return ConfigValue(
            key=key,
            value=parameter["Value"],
            secure=parameter.get("Type") == "SecureString",
        )


class StaticParameterResolver(ParameterResolver):
    """Resolves from an in-memory mapping, used for offline synth."""

    def __init__(
        self,
        values: Mapping[str, str],
        namespace: str = constants.PARAMETER_NAMESPACE,
        secure_keys: Iterable[str] = (),
    ) -> None:
        super().__init__(namespace)
        self.values = {qualify_key(k, namespace): v for k, v in values.items()}
        self.secure_keys = {qualify_key(k, namespace) for k in secure_keys}

    def _fetch(self, key: str) -> ConfigValue:
        if key not in self.values:
            raise ConfigurationMissing(
                f"Parameter {key} does not exist", details={"parameter": key}
            )
        return ConfigValue(
            key=key, value=str(self.values[key]), secure=key in self.secure_keys
        )
