import os

from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# ======================
# Login Manager
# ======================
# Users are restored from the stored API token on every request
# (see toratau.auth.load_user_from_session), never from a local table.
login_manager = LoginManager()
login_manager.login_view = "auth.login"
login_manager.login_message = "Please log in to continue."
login_manager.login_message_category = "warning"

# ======================
# Rate Limiter
# ======================
# Prefer Redis in production, fall back to in-memory locally.
_limiter_storage = (
    os.getenv("LIMITER_STORAGE_URL")
    or os.getenv("REDIS_URL")
    or "memory://"
)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],              # No global limits by default
    storage_uri=_limiter_storage,
)
