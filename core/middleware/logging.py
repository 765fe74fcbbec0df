"""
Structured request logging with PII masking.

Applicant data (emails, phone numbers) and credentials never reach the
logs: keys that look sensitive are redacted and free text is scrubbed
with the PII patterns below.
"""

import json
import logging
import re
import time
import traceback
import uuid
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


# Keys whose values are always redacted
SENSITIVE_FIELD_PATTERNS = [
    re.compile(r'password', re.IGNORECASE),
    re.compile(r'token', re.IGNORECASE),
    re.compile(r'api[_-]?key', re.IGNORECASE),
    re.compile(r'secret', re.IGNORECASE),
    re.compile(r'authorization', re.IGNORECASE),
    re.compile(r'bearer', re.IGNORECASE),
    re.compile(r'cookie', re.IGNORECASE),
    re.compile(r'session', re.IGNORECASE),
    re.compile(r'access[_-]?key', re.IGNORECASE),
]

# Keys holding applicant contact data; values are PII-scrubbed
CONTACT_FIELD_PATTERNS = [
    re.compile(r'e[_-]?mail', re.IGNORECASE),
    re.compile(r'phone', re.IGNORECASE),
]

# PII patterns to detect and mask inside free text
PII_PATTERNS = [
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    (re.compile(r'\+\d{1,3}[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}'), '[PHONE]'),
    (re.compile(r'\(?\b\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[PHONE]'),
    (re.compile(r'\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b'), '[IP]'),
]

SKIP_PATHS = ('/health', '/ready', '/docs', '/openapi.json', '/favicon.ico')


def is_sensitive_field(field_name: str) -> bool:
    return any(pattern.search(field_name) for pattern in SENSITIVE_FIELD_PATTERNS)


def is_contact_field(field_name: str) -> bool:
    return any(pattern.search(field_name) for pattern in CONTACT_FIELD_PATTERNS)


def mask_pii(text: str) -> str:
    for pattern, replacement in PII_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, depth: int = 0, max_depth: int = 10) -> Any:
    """
    Recursively mask sensitive data in dictionaries and lists.

    Args:
        data: Data structure to mask
        depth: Current recursion depth
        max_depth: Maximum recursion depth

    Returns:
        Data structure with sensitive values masked
    """
    if depth > max_depth:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_str = str(key)
            if is_sensitive_field(key_str):
                masked[key] = "[REDACTED]"
            elif is_contact_field(key_str) and value is not None:
                scrubbed = mask_pii(str(value))
                masked[key] = scrubbed if scrubbed != str(value) else "[REDACTED]"
            else:
                masked[key] = mask_sensitive_data(value, depth + 1, max_depth)
        return masked

    if isinstance(data, list):
        return [mask_sensitive_data(item, depth + 1, max_depth) for item in data]

    if isinstance(data, str):
        return mask_pii(data)

    return data


def mask_headers(headers: dict) -> dict:
    """Redact credential headers; keep the auth scheme for debugging."""
    masked = {}
    for key, value in headers.items():
        key_lower = key.lower()
        if not is_sensitive_field(key_lower):
            masked[key] = value
        elif key_lower == 'authorization' and isinstance(value, str) and ' ' in value:
            masked[key] = f"{value.split(' ', 1)[0]} [REDACTED]"
        else:
            masked[key] = "[REDACTED]"
    return masked


def should_log_request(path: str) -> bool:
    """Health probes and docs are not logged."""
    return not any(path.startswith(skip) for skip in SKIP_PATHS)


def get_client_ip(request: Request) -> str:
    """
    Client IP from ``x-forwarded-for`` or the socket, with the last IPv4
    octet masked. Anything that is not IPv4 is reported as ``unknown``.
    """
    forwarded_for = request.headers.get('x-forwarded-for')
    if forwarded_for:
        ip = forwarded_for.split(',')[0].strip()
    else:
        ip = request.client.host if request.client else 'unknown'

    parts = ip.split('.')
    if len(parts) == 4:
        return f"{parts[0]}.{parts[1]}.{parts[2]}.xxx"
    return 'unknown'


def _performance_bucket(duration: float) -> str:
    if duration > 5.0:
        return 'slow'
    if duration > 1.0:
        return 'moderate'
    return 'fast'


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one ``request_started`` and one ``request_completed`` JSON event per
    request and echoes an ``x-request-id`` header on every response.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        log_response_body: bool = False,
        max_body_size: int = 1024,
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.log_response_body = log_response_body
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
        request.state.request_id = request_id

        if not should_log_request(request.url.path):
            response = await call_next(request)
            response.headers['x-request-id'] = request_id
            return response

        start_time = time.perf_counter()

        request_log = {
            'event': 'request_started',
            'request_id': request_id,
            'method': request.method,
            'path': request.url.path,
            'query_params': mask_sensitive_data(dict(request.query_params)),
            'client_ip': get_client_ip(request),
            'user_agent': request.headers.get('user-agent', 'unknown'),
            'headers': mask_headers(dict(request.headers)),
        }

        if self.log_request_body and request.method in ('POST', 'PUT', 'PATCH'):
            body = await self._get_request_body(request)
            if body:
                request_log['body'] = mask_sensitive_data(body)

        logger.info(json.dumps(request_log, default=str))

        response = None
        error_details = None
        try:
            response = await call_next(request)
        except Exception as exc:
            error_details = {'type': type(exc).__name__, 'message': mask_pii(str(exc))}
            logger.error(
                f"Request processing error: {request.method} {request.url.path}",
                exc_info=True,
                extra={'request_id': request_id},
            )
            raise
        finally:
            duration = time.perf_counter() - start_time
            principal = getattr(request.state, 'principal', None)

            response_log = {
                'event': 'request_completed',
                'request_id': request_id,
                'method': request.method,
                'path': request.url.path,
                'duration_ms': round(duration * 1000, 2),
                'status_code': response.status_code if response else 500,
                'role': principal.role.value if principal else 'ANONYMOUS',
                'performance': _performance_bucket(duration),
            }
            if error_details:
                response_log['error'] = error_details

            status_code = response_log['status_code']
            if status_code >= 500:
                logger.error(json.dumps(response_log))
            elif status_code >= 400:
                logger.warning(json.dumps(response_log))
            else:
                logger.info(json.dumps(response_log))

            if response:
                response.headers['x-request-id'] = request_id

        return response

    async def _get_request_body(self, request: Request) -> Any:
        """JSON bodies only; uploads and oversized bodies are summarised."""
        content_type = request.headers.get('content-type', '')
        if 'application/json' not in content_type:
            return {'_content_type': content_type}

        body_bytes = await request.body()
        if len(body_bytes) > self.max_body_size:
            return {'_truncated': True, '_size': len(body_bytes)}

        try:
            return json.loads(body_bytes.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Could not parse request body: {e}")
            return None


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for attr in ('request_id', 'task_id', 'application_id', 'job_id'):
            if hasattr(record, attr):
                log_data[attr] = getattr(record, attr)

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': mask_pii(str(record.exc_info[1])),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Configure the root logger for the API process and the Celery worker.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Whether to format logs as JSON
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    if json_logs:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('aiobotocore').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
