"""
Role credentials

HTTP Basic credentials, one shared pair per role, checked against the
settings. Admin protects the menu and history endpoints; cook protects
status updates once cook credentials are configured.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from orderdesk.core.config import Settings
from orderdesk.core.exceptions import Unauthorized

logger = logging.getLogger(__name__)

REALM = "orderdesk"

http_basic = HTTPBasic(auto_error=False, realm=REALM)


def credentials_match(
    credentials: Optional[HTTPBasicCredentials],
    username: Optional[str],
    password: Optional[str],
) -> bool:
    """Constant-time comparison; unconfigured roles never match."""
    if credentials is None or not username or not password:
        return False
    user_ok = secrets.compare_digest(credentials.username.encode("utf-8"), username.encode("utf-8"))
    pass_ok = secrets.compare_digest(credentials.password.encode("utf-8"), password.encode("utf-8"))
    return user_ok and pass_ok


def _settings(request: Request) -> Settings:
    return request.app.state.settings


async def require_admin(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(http_basic),
) -> str:
    settings = _settings(request)
    if credentials_match(credentials, settings.admin_user, settings.admin_pass):
        return credentials.username

    logger.warning(f"Rejected admin credentials for {request.method} {request.url.path}")
    raise Unauthorized("Authentication required", realm=REALM)


async def require_kitchen(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(http_basic),
) -> Optional[str]:
    """Cook or admin credentials; open when no cook credentials are configured."""
    settings = _settings(request)
    if not settings.cook_auth_enabled:
        return None

    if credentials_match(credentials, settings.cook_user, settings.cook_pass):
        return credentials.username
    if credentials_match(credentials, settings.admin_user, settings.admin_pass):
        return credentials.username

    logger.warning(f"Rejected kitchen credentials for {request.method} {request.url.path}")
    raise Unauthorized("Authentication required", realm=REALM)
