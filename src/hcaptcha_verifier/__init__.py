"""
hCaptcha verifier for Python web apps

Check hCaptcha proof tokens against siteverify and reject requests that fail.
"""

from .models import FailureKind, SiteVerifyResponse, VerificationResult
from .config import ConfigError, HCaptchaConfig, new_with_defaults, validate_and_fill_defaults
from .client import HCaptchaClient
from .payload import build_siteverify_form
from .middleware.asgi import HCaptchaASGIMiddleware, HCaptchaGate, require_hcaptcha

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FailureKind",
    "HCaptchaASGIMiddleware",
    "HCaptchaClient",
    "HCaptchaConfig",
    "HCaptchaGate",
    "SiteVerifyResponse",
    "VerificationResult",
    "build_siteverify_form",
    "new_with_defaults",
    "require_hcaptcha",
    "validate_and_fill_defaults",
]
