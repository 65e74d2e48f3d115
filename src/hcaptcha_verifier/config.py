"""
Configuration for the hCaptcha verifier and its defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Protocol, Union

import httpx
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

# Status code returned when captcha verification fails
DEFAULT_ERROR_STATUS_CODE = 403

# Message returned when captcha verification fails
DEFAULT_ERROR_MESSAGE = "invalid captcha"

# Timeout in seconds for calls to siteverify
DEFAULT_HTTP_TIMEOUT = 10.0

# hCaptcha siteverify endpoint
DEFAULT_HCAPTCHA_URL = "https://hcaptcha.com/siteverify"

# Form field the hCaptcha widget submits
# https://docs.hcaptcha.com/#add-the-hcaptcha-widget-to-your-webpage
DEFAULT_RESPONSE_FIELD = "h-captcha-response"


class ConfigError(ValueError):
    """Raised when the verifier cannot be configured."""


class FormClient(Protocol):
    """Anything that can POST form data synchronously (e.g. ``httpx.Client``)."""

    def post(self, url: str, *, data: Mapping[str, str]) -> httpx.Response: ...


class AsyncFormClient(Protocol):
    """Anything that can POST form data asynchronously (e.g. ``httpx.AsyncClient``)."""

    async def post(self, url: str, *, data: Mapping[str, str]) -> httpx.Response: ...


ErrorResponder = Callable[[Request], Union[Response, Awaitable[Response]]]
CaptchaResponseGetter = Callable[[Request], Union[str, Awaitable[str]]]


def default_error_response(request: Request) -> Response:
    """Reject with ``403 {"message": "invalid captcha"}``."""
    return JSONResponse(
        status_code=DEFAULT_ERROR_STATUS_CODE,
        content={"message": DEFAULT_ERROR_MESSAGE},
    )


async def default_get_captcha_response(request: Request) -> str:
    """Read the ``h-captcha-response`` form field, or "" when absent or unreadable."""
    # Cache the body so the endpoint can still read the form afterwards
    await request.body()
    try:
        form = await request.form()
    except (HTTPException, MultiPartException):
        return ""
    value = form.get(DEFAULT_RESPONSE_FIELD)
    return value if isinstance(value, str) else ""


def default_http_client() -> httpx.Client:
    return httpx.Client(timeout=DEFAULT_HTTP_TIMEOUT)


def default_async_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=DEFAULT_HTTP_TIMEOUT)


@dataclass
class HCaptchaConfig:
    """
    hCaptcha verifier settings.

    Only ``secret`` is mandatory; call :func:`validate_and_fill_defaults` (or
    use :func:`new_with_defaults`) to populate the rest. The config is shared
    by all requests and must not be changed after that.

    Attributes:
        secret: hCaptcha secret, from https://dashboard.hcaptcha.com/settings
        site_key: Site key the proof must have been issued for. Disabled when empty.
        enable_user_ip_validation: Send the caller IP as ``remoteip``
        error_response: Builds the response for rejected requests
        get_captcha_response: Extracts the proof token from a request
        http_client: Sync client used by ``verify_sync``
        async_http_client: Async client used by the middleware
        hcaptcha_url: siteverify URL
    """
    secret: str
    site_key: str = ""
    enable_user_ip_validation: bool = False
    error_response: ErrorResponder | None = None
    get_captcha_response: CaptchaResponseGetter | None = None
    http_client: FormClient | None = None
    async_http_client: AsyncFormClient | None = None
    hcaptcha_url: str = ""


def validate_and_fill_defaults(config: HCaptchaConfig) -> HCaptchaConfig:
    """
    Validate ``config`` and fill every unset optional field in place.

    Raises:
        ConfigError: If the secret is missing
    """
    if not config.secret:
        raise ConfigError("mandatory parameter: secret key is missing")
    if config.error_response is None:
        config.error_response = default_error_response
    if config.get_captcha_response is None:
        config.get_captcha_response = default_get_captcha_response
    if config.http_client is None:
        config.http_client = default_http_client()
    if config.async_http_client is None:
        config.async_http_client = default_async_http_client()
    if not config.hcaptcha_url:
        config.hcaptcha_url = DEFAULT_HCAPTCHA_URL
    return config


def new_with_defaults(secret: str, **overrides: Any) -> HCaptchaConfig:
    """
    Build a config from a secret, with defaults for everything else.

    Example:
        >>> config = new_with_defaults("0x0000000000000000000000000000000000000000")
        >>> config.hcaptcha_url
        'https://hcaptcha.com/siteverify'
    """
    return validate_and_fill_defaults(HCaptchaConfig(secret=secret, **overrides))
