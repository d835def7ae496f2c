"""
Request helpers shared by the apps: client IP extraction, IP hashing and the
bearer-secret guard used by the cron endpoints.
"""
from __future__ import annotations

import hashlib
import hmac
from functools import wraps

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt


def get_client_ip(request: HttpRequest) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then REMOTE_ADDR."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.META.get("REMOTE_ADDR") or "unknown"


def hash_ip(ip: str) -> str:
    """SHA-256 of the IP address plus the configured salt. Raw IPs are never stored."""
    return hashlib.sha256(f"{ip}{settings.IP_HASH_SALT}".encode("utf-8")).hexdigest()


def cron_secret_required(view_func):
    """Only let through requests carrying ``Authorization: Bearer <CRON_SECRET>``."""
    @csrf_exempt
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        secret = settings.CRON_SECRET
        if not secret:
            return JsonResponse({"error": "CRON_SECRET not configured"}, status=500)
        auth_header = request.headers.get("Authorization", "")
        if not hmac.compare_digest(auth_header, f"Bearer {secret}"):
            return JsonResponse({"error": "Unauthorized"}, status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped_view
