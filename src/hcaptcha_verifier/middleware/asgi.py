"""
ASGI middleware for hCaptcha verification (FastAPI/Starlette).
"""

import functools
import inspect
from typing import Any, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..client import HCaptchaClient
from ..config import HCaptchaConfig, new_with_defaults, validate_and_fill_defaults
from ..models import VerificationResult
from ..payload import client_ip


async def _resolve(value: Any) -> Any:
    """Await ``value`` if a strategy returned an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class HCaptchaGate:
    """
    Pass/fail decision for a single request.

    Extracts the proof token with the configured strategy, verifies it and
    builds the rejection response. Shared by the middleware and
    :func:`require_hcaptcha`.
    """

    def __init__(self, config: HCaptchaConfig):
        self.config = validate_and_fill_defaults(config)
        self.client = HCaptchaClient.from_config(self.config)

    async def verify(self, request: Request) -> VerificationResult:
        token = await _resolve(self.config.get_captcha_response(request))
        remote_ip = client_ip(request) if self.config.enable_user_ip_validation else None
        result = await self.client.verify(token, remote_ip=remote_ip)
        request.state.hcaptcha = result
        return result

    async def validate_captcha(self, request: Request) -> bool:
        result = await self.verify(request)
        return result.verified

    async def error_response(self, request: Request) -> Response:
        return await _resolve(self.config.error_response(request))


def _build_config(config: HCaptchaConfig | None, secret: str | None) -> HCaptchaConfig:
    if config is not None:
        return config
    return new_with_defaults(secret or "")


class HCaptchaASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware for hCaptcha verification.

    Every request must carry a valid proof token. Rejected requests get the
    configured error response (default ``403 {"message": "invalid captcha"}``)
    and never reach the endpoint. Verified requests carry the result on
    `request.state.hcaptcha`.

    Args:
        app: ASGI application
        config: Verifier configuration, defaults are filled in
        secret: Shortcut for ``config=new_with_defaults(secret)``

    Raises:
        ConfigError: If no secret is configured

    Example (FastAPI):
        >>> from fastapi import FastAPI
        >>> from hcaptcha_verifier import HCaptchaASGIMiddleware
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(HCaptchaASGIMiddleware, secret=HCAPTCHA_SECRET)
        >>>
        >>> @app.post("/signup")
        >>> async def signup():
        ...     return {"status": "ok"}
    """

    def __init__(
        self,
        app: Any,
        config: HCaptchaConfig | None = None,
        secret: str | None = None,
    ):
        super().__init__(app)
        self.gate = HCaptchaGate(_build_config(config, secret))

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        if await self.gate.validate_captcha(request):
            return await call_next(request)
        return await self.gate.error_response(request)


def require_hcaptcha(
    config: HCaptchaConfig,
) -> Callable[[Callable[[Request], Awaitable[Response]]], Callable[[Request], Awaitable[Response]]]:
    """
    Protect a single Starlette endpoint.

    Example:
        >>> config = new_with_defaults(HCAPTCHA_SECRET)
        >>>
        >>> @require_hcaptcha(config)
        ... async def signup(request):
        ...     return PlainTextResponse("good")
        >>>
        >>> app = Starlette(routes=[Route("/signup", signup, methods=["POST"])])
    """
    gate = HCaptchaGate(config)

    def decorator(
        endpoint: Callable[[Request], Awaitable[Response]],
    ) -> Callable[[Request], Awaitable[Response]]:
        @functools.wraps(endpoint)
        async def wrapper(request: Request) -> Response:
            if await gate.validate_captcha(request):
                return await endpoint(request)
            return await gate.error_response(request)

        return wrapper

    return decorator
