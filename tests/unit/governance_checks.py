from stack_test_helpers import find_resources_by_type, flatten_intrinsic, get_single_resource_id
from governance_test_helpers import AWSService, resource_governance_doc_url

SECRET_MARKERS = ("TOKEN", "SECRET", "PASSWORD")


def _as_list(value):
    return value if isinstance(value, list) else [value]


def assert_iam_least_privilege(template):
    governance_doc = resource_governance_doc_url(AWSService.IAM_Role.value)
    for role in find_resources_by_type(template, "AWS::IAM::Role").values():
        assert not role["Properties"].get("ManagedPolicyArns"), (
            "Build roles must not carry managed policies "
            f"according to chatui security standards. see {governance_doc}"
        )
    for policy in find_resources_by_type(template, "AWS::IAM::Policy").values():
        for statement in policy["Properties"]["PolicyDocument"]["Statement"]:
            assert statement["Effect"] == "Allow"
            for action in _as_list(statement["Action"]):
                assert "*" not in action, f"wildcard action {action}. see {governance_doc}"
            for resource in _as_list(statement["Resource"]):
                flat = flatten_intrinsic(resource)
                stem = flat.rstrip("*?")
                assert stem and not any(w in stem for w in "*?"), (
                    f"resource {flat} is broader than a namespace prefix. see {governance_doc}"
                )


def assert_no_secrets_in_environment(template):
    governance_doc = resource_governance_doc_url(AWSService.Amplify.value)
    apps = find_resources_by_type(template, "AWS::Amplify::App")
    logical_id = get_single_resource_id(apps, "AWS::Amplify::App")
    for variable in apps[logical_id]["Properties"].get("EnvironmentVariables", []):
        name, value = variable["Name"], flatten_intrinsic(variable["Value"])
        assert "resolve:secretsmanager" not in value, f"{name} leaks a secret. see {governance_doc}"
        assert not any(marker in name.upper() for marker in SECRET_MARKERS), (
            f"{name} looks like a credential. see {governance_doc}"
        )
