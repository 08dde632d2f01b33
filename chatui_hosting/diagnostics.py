"""Operator checks for the Amplify hosting pipeline.

``preflight`` confirms every parameter the descriptor consumes resolves and the
source token secret exists (its value is never read). ``job-status`` reports
the latest build of a branch and fails loudly when that build failed, which is
where an unreachable repository or a bad token shows up.

Usage:
    python -m chatui_hosting.diagnostics preflight --region us-east-1
    python -m chatui_hosting.diagnostics job-status --app-id d123 --branch main
"""
import argparse
import os
import sys
from typing import Any, Optional, Sequence

import boto3
from attrs import define, field
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from chatui_hosting.parameters import ACCESS_DENIED_CODES, SsmParameterResolver
from common.errors import (
    ConfigurationMissing,
    HostingError,
    PermissionDenied,
    SourceUnreachable,
)
from common.settings import HostingSettings

logger = Logger(service="chatui-hosting", level=os.getenv("LOG_LEVEL", "INFO").upper())

FAILED = "FAILED"


@define(slots=True, frozen=True)
class JobReport:
    job_id: str
    status: str
    commit_id: Optional[str] = None
    failed_steps: tuple[dict, ...] = field(default=(), converter=tuple)


def check_secret_reference(client: Any, secret_name: str) -> str:
    """Return the secret ARN without reading its value."""
    try:
        return client.describe_secret(SecretId=secret_name)["ARN"]
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        details = {"secret": secret_name, "code": code}
        if code == "ResourceNotFoundException":
            raise ConfigurationMissing(f"Secret {secret_name} does not exist", details=details) from e
        if code in ACCESS_DENIED_CODES:
            raise PermissionDenied(f"Not allowed to describe secret {secret_name}", details=details) from e
        raise


def preflight(
    settings: HostingSettings, ssm_client: Any = None, secrets_client: Any = None
) -> dict[str, Any]:
    resolver = SsmParameterResolver(namespace=settings.parameter_namespace, client=ssm_client)
    resolved = resolver.resolve_all(settings.environment_bindings.values())
    secret_arn = check_secret_reference(
        secrets_client or boto3.client("secretsmanager"), settings.secret_name
    )
    return {
        "parameters": sorted(value.key for value in resolved.values()),
        "secret_arn": secret_arn,
    }


def latest_job_report(client: Any, app_id: str, branch: str) -> JobReport:
    summaries = client.list_jobs(appId=app_id, branchName=branch, maxResults=1)["jobSummaries"]
    if not summaries:
        raise ConfigurationMissing(
            f"Branch {branch} of app {app_id} has no jobs yet",
            details={"app_id": app_id, "branch": branch},
        )
    job_id = summaries[0]["jobId"]
    job = client.get_job(appId=app_id, branchName=branch, jobId=job_id)["job"]
    failed_steps = [
        {
            "step": step["stepName"],
            "reason": step.get("statusReason", "no reason reported"),
            "log_url": step.get("logUrl"),
        }
        for step in job.get("steps", [])
        if step.get("status") == FAILED
    ]
    return JobReport(
        job_id=job_id,
        status=job["summary"]["status"],
        commit_id=job["summary"].get("commitId"),
        failed_steps=failed_steps,
    )


def raise_for_job(report: JobReport, app_id: str, branch: str) -> None:
    if report.status != FAILED:
        return
    reasons = "; ".join(f"{s['step']}: {s['reason']}" for s in report.failed_steps)
    raise SourceUnreachable(
        f"Job {report.job_id} on {branch} failed: {reasons or 'no failed step reported'}",
        details={"app_id": app_id, "branch": branch, "failed_steps": list(report.failed_steps)},
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chatui-hosting-diagnostics", description=__doc__.splitlines()[0])
    parser.add_argument("--region", default=os.getenv("CDK_DEFAULT_REGION"))
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("preflight", help="Resolve parameters and the token secret")
    check.add_argument("--namespace", default=HostingSettings().parameter_namespace)
    check.add_argument("--secret-name", default=HostingSettings().secret_name)

    status = commands.add_parser("job-status", help="Report the latest build of a branch")
    status.add_argument("--app-id", required=True)
    status.add_argument("--branch", required=True)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    session = boto3.Session(region_name=args.region)
    try:
        if args.command == "preflight":
            settings = HostingSettings(
                parameter_namespace=args.namespace, secret_name=args.secret_name
            )
            report = preflight(
                settings,
                ssm_client=session.client("ssm"),
                secrets_client=session.client("secretsmanager"),
            )
            logger.info("Preflight passed", **report)
        else:
            report = latest_job_report(session.client("amplify"), args.app_id, args.branch)
            logger.info("Latest job", job_id=report.job_id, status=report.status, commit_id=report.commit_id)
            raise_for_job(report, args.app_id, args.branch)
    except HostingError as e:
        logger.error("Diagnostics failed", error=e.to_dict())
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
