"""
Building the form sent to siteverify.
"""

from starlette.requests import Request


def build_siteverify_form(
    secret: str,
    token: str,
    remote_ip: str | None = None,
    site_key: str = "",
) -> dict[str, str]:
    """
    Build the form fields for a siteverify call.

    Rules:
    1. Always include ``secret`` and ``response``
    2. Include ``remoteip`` when a remote IP is given (even an empty one)
    3. Include ``sitekey`` only when the site key is non-empty

    Examples:
        >>> build_siteverify_form("s3cret", "token", site_key="site")
        {'secret': 's3cret', 'response': 'token', 'sitekey': 'site'}
        >>> build_siteverify_form("s3cret", "token", remote_ip="203.0.113.7")
        {'secret': 's3cret', 'response': 'token', 'remoteip': '203.0.113.7'}
    """
    form = {"secret": secret, "response": token}
    if remote_ip is not None:
        form["remoteip"] = remote_ip
    if site_key:
        form["sitekey"] = site_key
    return form


def client_ip(request: Request) -> str:
    """Caller address as reported by the ASGI server, or "" if unknown."""
    if request.client is None:
        return ""
    return request.client.host
