"""
hCaptcha middleware for ASGI frameworks.

Re-exports middleware classes for convenient imports:
    from hcaptcha_verifier.middleware import HCaptchaASGIMiddleware
"""

from .asgi import HCaptchaASGIMiddleware, HCaptchaGate, require_hcaptcha

__all__ = [
    "HCaptchaASGIMiddleware",
    "HCaptchaGate",
    "require_hcaptcha",
]
