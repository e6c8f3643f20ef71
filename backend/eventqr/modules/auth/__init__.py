# Authentication module

from eventqr.modules.auth.dependencies import (
    require_auth,
    require_admin,
    ensure_not_self,
    ensure_owner_or_admin,
)
from eventqr.modules.auth.session_cookie import (
    get_session_token,
    set_session_cookie,
    clear_session_cookie,
)

__all__ = [
    "require_auth",
    "require_admin",
    "ensure_not_self",
    "ensure_owner_or_admin",
    "get_session_token",
    "set_session_cookie",
    "clear_session_cookie",
]
