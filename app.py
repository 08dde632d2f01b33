#!/usr/bin/env python3
"""AWS CDK entrypoint for hosting the chat UI on Amplify.

Settings come from cdk context (cdk.json or ``-c key=value``) and the account
and region from the CDK CLI defaults. Pass ``-c parameter_overrides='{...}'``
to synthesize without reading the shared parameter store.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment

from chatui_hosting.chatui_hosting_stack import ChatUiHostingStack
from common.settings import HostingSettings

app = cdk.App()

env = Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION"),
)

ChatUiHostingStack(
    app,
    "AmplifyChatuiStack",
    settings=HostingSettings.from_context(app.node),
    env=env,
)

app.synth()
