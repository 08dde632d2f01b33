from attrs import define, field
from attrs.validators import instance_of, min_len
from aws_cdk import SecretValue

import common.constants as constants


@define(slots=True, frozen=True)
class SourceBinding:
    """Where the frontend source lives and which secret authenticates fetches.

    Only the secret's name is held here. The token itself is resolved by
    CloudFormation at deploy time through a dynamic reference, so an invalid
    or missing token surfaces as a build provisioning failure, not here.
    """

    owner: str = field(validator=[instance_of(str), min_len(1)])
    repository: str = field(validator=[instance_of(str), min_len(1)])
    secret_name: str = field(
        default=constants.SOURCE_TOKEN_SECRET_NAME,
        validator=[instance_of(str), min_len(1)],
    )

    @property
    def repository_url(self) -> str:
        return constants.GITHUB_URL.format(owner=self.owner, repository=self.repository)

    def access_token(self) -> str:
        return SecretValue.secrets_manager(self.secret_name).unsafe_unwrap()
