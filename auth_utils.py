import logging
import re

from supabase import create_client, Client

from config import Config
from exceptions import AuthError, ValidationError
from models import SessionContext

logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"^[a-zA-Z0-9]{1,10}$")
MIN_PASSWORD_LENGTH = 6


def new_client() -> Client:
    # one client per login: the client carries that user's auth session
    return create_client(Config.SUPABASE_URL, Config.SUPABASE_KEY)


def is_valid_username(username) -> bool:
    return isinstance(username, str) and bool(USERNAME_RE.fullmatch(username))


def username_to_email(username: str) -> str:
    return f"{username.lower()}@{Config.USERNAME_DOMAIN}"


def validate_credentials(username, password):
    if not is_valid_username(username):
        raise ValidationError("用户名只能包含英文字母和数字，最多10个字符", field="username")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"密码至少需要{MIN_PASSWORD_LENGTH}个字符", field="password")


def _context_from_response(response, username, client) -> SessionContext:
    user = getattr(response, "user", None)
    if user is None or getattr(response, "session", None) is None:
        raise AuthError("登录失败，请重试")
    return SessionContext(user_id=user.id, username=username.lower(), client=client)


def login_user(username, password, client=None) -> SessionContext:
    validate_credentials(username, password)
    client = client or new_client()
    try:
        response = client.auth.sign_in_with_password({
            "email": username_to_email(username),
            "password": password,
        })
    except Exception as e:
        logger.warning("Login failed for %s: %s", username, e)
        if "Invalid login credentials" in str(e):
            raise AuthError("用户名或密码错误") from e
        raise AuthError(str(e) or "发生错误，请重试") from e
    ctx = _context_from_response(response, username, client)
    logger.info("User %s logged in", ctx.username)
    return ctx


def register_user(username, password, client=None):
    """Create the account and sign straight in.

    Returns the SessionContext, or None when the account was created but the
    automatic sign-in did not go through (the user can log in manually).
    """
    validate_credentials(username, password)
    client = client or new_client()
    email = username_to_email(username)
    try:
        client.auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": {"username": username.lower()}},
        })
    except Exception as e:
        logger.warning("Registration failed for %s: %s", username, e)
        if "already registered" in str(e):
            raise AuthError("该用户名已被注册") from e
        raise AuthError(str(e) or "发生错误，请重试") from e

    try:
        return login_user(username, password, client=client)
    except AuthError as e:
        logger.info("Registered %s but auto sign-in failed: %s", username, e)
        return None


def logout_user(ctx: SessionContext) -> None:
    if ctx.client is not None:
        try:
            ctx.client.auth.sign_out()
        except Exception as e:
            logger.warning("Supabase sign-out failed for %s: %s", ctx.username, e)
    ctx.teardown()
