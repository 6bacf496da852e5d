"""
Rent The Moment Backend — Security Headers Middleware
====================================================

What:  Stamps a fixed set of hardening headers on every response.

Headers:
    X-Content-Type-Options: nosniff        browsers must trust Content-Type
    X-Frame-Options: DENY                  no framing (clickjacking)
    Referrer-Policy: no-referrer           no URL leakage to third parties
    Cross-Origin-Resource-Policy           images may be embedded cross-origin
    Strict-Transport-Security              production only
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.headers = dict(BASE_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
