"""Audit logging for admin actions."""
from datetime import datetime, timezone
from typing import Dict

from retrosnap_gateway import logging_client

logger = logging_client.setup_logger('gateway-audit')


async def log_admin_action(
    admin_user: str,
    action: str,
    parameters: Dict,
    result: str
):
    """
    Log admin action to the audit trail.

    Args:
        admin_user: Masked email of the admin performing the action
        action: Action performed (e.g., "set_credits", "add_credits")
        parameters: Action parameters (emails already masked)
        result: Action result ("success", "failure: ...", "error: ...")
    """
    audit_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "admin_user": admin_user,
        "action": action,
        "parameters": parameters,
        "result": result
    }

    logger.info(f"📋 AUDIT: {admin_user} performed {action} → {result}")
    logger.debug(f"Audit details: {audit_entry}")
