"""
Client for the hCaptcha siteverify endpoint.
"""

import json
import logging

import httpx

from .config import (
    DEFAULT_HCAPTCHA_URL,
    AsyncFormClient,
    ConfigError,
    FormClient,
    HCaptchaConfig,
    default_async_http_client,
    default_http_client,
)
from .models import FailureKind, SiteVerifyResponse, VerificationResult
from .payload import build_siteverify_form

logger = logging.getLogger(__name__)


class HCaptchaClient:
    """
    Client for hCaptcha siteverify.

    Sends one form POST per verification and never raises for service
    problems: transport errors, unreadable bodies and malformed replies all
    come back as ``verified=False``.

    Args:
        secret: hCaptcha secret key
        site_key: Expected site key, omitted from the request when empty
        hcaptcha_url: siteverify URL. Default: https://hcaptcha.com/siteverify
        http_client: Client used by ``verify_sync``
        async_http_client: Client used by ``verify``

    Example:
        >>> client = HCaptchaClient("0x0000000000000000000000000000000000000000")
        >>> result = await client.verify("10000000-aaaa-bbbb-cccc-000000000001")
        >>> if result.verified:
        ...     print(result.response.hostname)
    """

    def __init__(
        self,
        secret: str,
        site_key: str = "",
        hcaptcha_url: str = DEFAULT_HCAPTCHA_URL,
        http_client: FormClient | None = None,
        async_http_client: AsyncFormClient | None = None,
    ):
        if not secret:
            raise ConfigError("mandatory parameter: secret key is missing")
        self.secret = secret
        self.site_key = site_key
        self.hcaptcha_url = hcaptcha_url or DEFAULT_HCAPTCHA_URL
        self.http_client = http_client or default_http_client()
        self.async_http_client = async_http_client or default_async_http_client()

    @classmethod
    def from_config(cls, config: HCaptchaConfig) -> "HCaptchaClient":
        return cls(
            secret=config.secret,
            site_key=config.site_key,
            hcaptcha_url=config.hcaptcha_url,
            http_client=config.http_client,
            async_http_client=config.async_http_client,
        )

    async def verify(self, token: str, remote_ip: str | None = None) -> VerificationResult:
        """
        Verify a proof token asynchronously.

        Args:
            token: Proof token submitted by the hCaptcha widget
            remote_ip: Caller IP to send as ``remoteip``, omitted when None

        Returns:
            VerificationResult, verified only if siteverify said so
        """
        form = build_siteverify_form(self.secret, token, remote_ip, self.site_key)
        try:
            response = await self.async_http_client.post(self.hcaptcha_url, data=form)
        except (httpx.HTTPError, OSError) as e:
            return self._failure(FailureKind.TRANSPORT, "siteverify request failed", e)

        try:
            body = await response.aread()
        except (httpx.HTTPError, OSError) as e:
            return self._failure(FailureKind.READ, "cannot read siteverify response body", e)
        finally:
            await response.aclose()

        return self._parse_response(response, body)

    def verify_sync(self, token: str, remote_ip: str | None = None) -> VerificationResult:
        """
        Verify a proof token synchronously.

        Args:
            token: Proof token submitted by the hCaptcha widget
            remote_ip: Caller IP to send as ``remoteip``, omitted when None

        Returns:
            VerificationResult, verified only if siteverify said so
        """
        form = build_siteverify_form(self.secret, token, remote_ip, self.site_key)
        try:
            response = self.http_client.post(self.hcaptcha_url, data=form)
        except (httpx.HTTPError, OSError) as e:
            return self._failure(FailureKind.TRANSPORT, "siteverify request failed", e)

        try:
            body = response.read()
        except (httpx.HTTPError, OSError) as e:
            return self._failure(FailureKind.READ, "cannot read siteverify response body", e)
        finally:
            response.close()

        return self._parse_response(response, body)

    def _parse_response(self, response: httpx.Response, body: bytes) -> VerificationResult:
        """Parse the siteverify body into a VerificationResult."""
        try:
            parsed = SiteVerifyResponse.from_dict(json.loads(body))
        except (ValueError, RecursionError) as e:
            return self._failure(
                FailureKind.PARSE,
                f"cannot parse siteverify response (status {response.status_code})",
                e,
            )

        if not parsed.success:
            logger.info(
                "hCaptcha rejected the proof token, error codes: %s",
                ", ".join(parsed.error_codes) or "none",
            )
            return VerificationResult(
                verified=False,
                failure=FailureKind.REJECTED,
                error=", ".join(parsed.error_codes) or "captcha rejected",
                response=parsed,
            )

        return VerificationResult(verified=True, response=parsed)

    def _failure(self, kind: FailureKind, message: str, exc: Exception) -> VerificationResult:
        logger.warning("Error in siteverify (%s): %s: %r", self.hcaptcha_url, message, exc)
        return VerificationResult(
            verified=False,
            failure=kind,
            error=f"{message}: {exc}",
        )
