"""
Security headers middleware for the DicomVault API.
"""
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds security headers to every API response.

    Features:
    - Content Security Policy (CSP) locked down for a JSON API
    - X-Frame-Options
    - X-Content-Type-Options
    - X-XSS-Protection
    - Strict-Transport-Security (HSTS) in production or over HTTPS
    - Referrer-Policy
    - Cross-Origin-Opener-Policy
    """

    def __init__(
        self,
        app,
        *,
        is_production: bool = False,
        server_name: Optional[str] = None,
        hsts_max_age: int = 31536000,  # 1 year
        hsts_include_subdomains: bool = True,
        content_security_policy: Optional[str] = None,
        frame_options: str = "DENY",
        content_type_options: bool = True,
        xss_protection: str = "1; mode=block",
        referrer_policy: str = "strict-origin-when-cross-origin",
        custom_headers: Optional[Dict[str, str]] = None,
        exclude_paths: Optional[List[str]] = None,
    ):
        super().__init__(app)
        self.is_production = is_production
        self.server_name = server_name
        self.hsts_max_age = hsts_max_age
        self.hsts_include_subdomains = hsts_include_subdomains
        self.frame_options = frame_options
        self.content_type_options = content_type_options
        self.xss_protection = xss_protection
        self.referrer_policy = referrer_policy
        self.custom_headers = custom_headers or {}
        self.exclude_paths = exclude_paths or []
        self.content_security_policy = content_security_policy or self._build_default_csp()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        # Interactive docs load their own scripts and styles
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return response

        self._add_security_headers(request, response)
        return response

    def _add_security_headers(self, request: Request, response: Response):
        if self.content_type_options:
            response.headers["X-Content-Type-Options"] = "nosniff"

        if self.frame_options:
            response.headers["X-Frame-Options"] = self.frame_options

        if self.xss_protection:
            response.headers["X-XSS-Protection"] = self.xss_protection

        if self.referrer_policy:
            response.headers["Referrer-Policy"] = self.referrer_policy

        if self.content_security_policy:
            response.headers["Content-Security-Policy"] = self.content_security_policy

        if self._should_add_hsts(request):
            hsts_value = f"max-age={self.hsts_max_age}"
            if self.hsts_include_subdomains:
                hsts_value += "; includeSubDomains"
            response.headers["Strict-Transport-Security"] = hsts_value

        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"

        for header_name, header_value in self.custom_headers.items():
            response.headers[header_name] = header_value

        # Don't advertise server software
        if self.server_name:
            response.headers["Server"] = self.server_name

    def _build_default_csp(self) -> str:
        """Responses are JSON or redirects, so nothing may be loaded or framed."""
        return "; ".join([
            "default-src 'none'",
            "base-uri 'none'",
            "form-action 'none'",
            "frame-ancestors 'none'",
        ])

    def _should_add_hsts(self, request: Request) -> bool:
        if self.is_production:
            return True
        forwarded_proto = request.headers.get("x-forwarded-proto", "")
        return request.url.scheme == "https" or forwarded_proto.lower() == "https"
