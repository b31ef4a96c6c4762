import re
from datetime import datetime


def find_named_matches(pattern: re.Pattern, text: str) -> dict[str, str]:
    """Named groups of the first match of `pattern` in `text`, empty if none."""
    match = pattern.search(text or "")
    if not match:
        return {}
    return {name: value or "" for name, value in match.groupdict().items()}


def role_name_from_arn(role_arn: str) -> str:
    """
    'arn:aws:iam::123456789012:role/service/Aurora_access' -> 'Aurora_access'.
    Returns an empty string for anything that is not an IAM role ARN.
    """
    parts = role_arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn" or not parts[5].startswith("role/"):
        return ""
    return parts[5].rsplit("/", 1)[-1]


def generate_filename(command: str, fmt: str) -> str:
    """Generate a timestamped filename like 'dbcheck_checks_20240723_101500.html'"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"dbcheck_{command}_{timestamp}.{fmt.lower()}"
