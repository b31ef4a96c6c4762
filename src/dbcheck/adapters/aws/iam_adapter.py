# src/dbcheck/adapters/aws/iam_adapter.py
"""
AWS IAM adapter — managed policies attached to the cluster's roles.
"""

from botocore.exceptions import BotoCoreError, ClientError

from dbcheck.core.exceptions import ProviderFailure


def fetch_attached_role_policies(iam, role_name: str) -> list[dict]:
    """
    Lists the managed policies attached to `role_name`.

    IAM is a global service; the role name must not include its path.
    """
    policies = []
    try:
        paginator = iam.get_paginator("list_attached_role_policies")
        for page in paginator.paginate(RoleName=role_name):
            policies.extend(page.get("AttachedPolicies", []))
    except (ClientError, BotoCoreError) as e:
        raise ProviderFailure(f"iam:ListAttachedRolePolicies {role_name}", e) from e
    return policies
