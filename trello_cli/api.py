"""
HTTP request layer, security helpers, and credential validation for trello-cli.
"""

import json
import re
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid

from trello_cli import config
from trello_cli.exceptions import (
    HTTPError,
    RemoteConflictError,
    RemoteError,
    SetupError,
)

_RETRYABLE_HTTP_CODES = frozenset({429, 502, 503, 504})
_CONFLICT_HTTP_CODES = frozenset({409, 412})
_SECRET_PARAMS = {"key", "token"}


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    return token[:6] + "..." if len(token) > 6 else token


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _sanitize_url_for_log(url):
    """Mask key/token query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in _SECRET_PARAMS:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def _parse_retry_after(headers):
    """Return Retry-After seconds from response headers, or None."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        secs = int(str(value).strip())
    except ValueError:
        return None
    return max(0, secs)


def _encode_body(data):
    """Return (bytes, content_type) for a request payload."""
    if data is None:
        return None, None
    if isinstance(data, tuple):
        # Pre-encoded (body, content_type), e.g. multipart uploads.
        return data
    return json.dumps(data).encode("utf-8"), "application/json"


def _http_request(url, data=None, headers=None, method="GET", idempotent=False):
    """Make an HTTP request with standard error handling.
    Returns parsed JSON on success.
    Raises HTTPError for HTTP errors (caller handles specific codes).
    Raises RemoteError on network/timeout/parse errors."""
    body, content_type = _encode_body(data)
    headers = dict(headers or {})
    if content_type:
        headers["Content-Type"] = content_type
    request_id = headers.get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    max_attempts = 1 + max(0, config.HTTP_MAX_RETRIES if idempotent else 0)
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)

    for attempt in range(max_attempts):
        start = time.perf_counter()
        will_retry = idempotent and attempt < max_attempts - 1
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        _log_http_event(
            phase="request",
            method=method,
            url=safe_url,
            attempt=attempt + 1,
            max_attempts=max_attempts,
            request_id=request_id,
        )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
                if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                    raise RemoteError(
                        "Response too large from Trello API "
                        f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes).",
                        category="malformed",
                    )
                _log_http_event(
                    phase="response",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    status=getattr(resp, "status", 200),
                    bytes=len(raw),
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    request_id=request_id,
                )
                if not raw.strip():
                    return {}
                try:
                    return json.loads(raw.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    raise RemoteError(
                        "Unexpected response from Trello API (not valid JSON).",
                        category="malformed",
                    ) from None
        except urllib.error.HTTPError as e:
            error_body = (
                e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
                if e.fp
                else ""
            )
            can_retry = will_retry and e.code in _RETRYABLE_HTTP_CODES
            _log_http_event(
                phase="response",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                status=e.code,
                will_retry=can_retry,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
            if can_retry:
                retry_after = _parse_retry_after(getattr(e, "headers", None))
                if retry_after is None:
                    retry_after = config.HTTP_RETRY_BASE_SECONDS * (2**attempt)
                time.sleep(retry_after)
                continue
            raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
        except TimeoutError as e:
            _log_http_event(
                phase="network_error",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                error="timeout",
                will_retry=will_retry,
                request_id=request_id,
            )
            if will_retry:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteError(
                f"Request timed out after {timeout} seconds. Is the Trello API reachable?",
                category="network",
            ) from e
        except urllib.error.URLError as e:
            _log_http_event(
                phase="network_error",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                error=f"url_error: {e.reason}",
                will_retry=will_retry,
                request_id=request_id,
            )
            if will_retry:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteError(f"Connection failed: {e.reason}", category="network") from e

    raise RemoteError("Request failed.", category="network")


def build_url(path, params=None):
    """Build an authenticated Trello API URL for *path* with query *params*."""
    query = [("key", config.API_KEY), ("token", config.TOKEN)]
    for name, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            value = ",".join(value)
        query.append((name, value))
    return f"{config.BASE_URL}/1/{path.lstrip('/')}?{urllib.parse.urlencode(query)}"


def trello_request(path, params=None, data=None, method="GET"):
    """Make an authenticated request against the Trello REST API.
    Maps HTTP failures onto the CLI error hierarchy."""
    url = build_url(path, params)
    headers = {
        "Accept": "application/json",
        "X-Request-Id": str(uuid.uuid4()),
    }
    try:
        return _http_request(url, data, headers, method, idempotent=method == "GET")
    except HTTPError as e:
        detail = _sanitize_error(e.body)
        if e.code in (401, 403):
            raise SetupError(
                "[TOKEN_EXPIRED] Trello rejected the API key or token "
                f"(HTTP {e.code}). Run: trello-cli setup"
            ) from e
        if e.code in _CONFLICT_HTTP_CODES:
            raise RemoteConflictError(path, f"HTTP {e.code}: {detail or e.reason}") from e
        if e.code == 404:
            raise RemoteError(
                f"HTTP 404: {method} /1/{path.lstrip('/')} not found.",
                category="not_found",
                status=404,
            ) from e
        if e.code == 429:
            raise RemoteError(
                "Rate limit reached. Wait a few seconds and retry.",
                category="rate_limit",
                status=429,
            ) from e
        message = f"HTTP {e.code}: {e.reason}"
        if detail:
            message += f"\n{detail}"
        raise RemoteError(message, category="http", status=e.code) from e


def encode_multipart(fields, file_field, filename, content):
    """Encode a multipart/form-data body. Returns (body, content_type)."""
    boundary = f"----trello-cli-{uuid.uuid4().hex}"
    parts = []
    for name, value in fields.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    parts.append(
        f"--{boundary}\r\nContent-Disposition: form-data; "
        f'name="{file_field}"; filename="{filename}"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n".encode()
    )
    parts.append(content)
    parts.append(f"\r\n--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


# ---------------------------------------------------------------------------
# Credential validation
# ---------------------------------------------------------------------------


def _check_token():
    """Validate API key and token before running a command."""
    if not config.API_KEY or not config.TOKEN:
        raise SetupError(
            "[SETUP_NEEDED] No Trello API key/token configured.\n  Run: trello-cli setup"
        )
    result = trello_request("members/me", {"fields": "id"})
    if not isinstance(result, dict) or not result.get("id"):
        raise SetupError(
            "[TOKEN_EXPIRED] Could not identify the Trello member for this token.\n"
            "  Run: trello-cli setup"
        )
    return result
