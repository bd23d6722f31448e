"""HTTP render service: PDF download, preview and totals endpoints."""

from __future__ import annotations

import atexit
import errno
import json
import logging
import multiprocessing as mp
import threading
from concurrent.futures import Future, ProcessPoolExecutor, TimeoutError as FutureTimeoutError
from concurrent.futures.process import BrokenProcessPool
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Optional, Tuple

from .config import (
    LISTEN_BACKLOG,
    MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG,
    MAX_CONCURRENT_RENDERS,
    MAX_INFLIGHT_RENDERS,
    MAX_PAGES as MAX_PAGES_CONFIG,
    RENDER_QUEUE_TIMEOUT_MS,
    RENDER_TIMEOUT_MS,
)
from .pagination import estimate_page_count, max_items_for_pages

logger = logging.getLogger(__name__)

ValidationError = Tuple[int, Dict[str, Any]]
Renderer = Callable[[Dict[str, Any]], Any]

PDF_PATHS = ("/", "/invoice", "/generate")
PREVIEW_PATHS = ("/preview",)
TOTALS_PATHS = ("/totals",)
HEALTH_PATHS = ("/", "/health", "/healthz", "/ready")

DISCONNECT_ERRNOS = {errno.EPIPE, errno.ECONNRESET, errno.ETIMEDOUT}


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def error_response(status: int, code: str, detail: str, **extra: Any) -> ValidationError:
    body: Dict[str, Any] = {"error": code, "detail": detail}
    body.update(extra)
    return status, body


def load_renderers() -> Tuple[Renderer, Renderer]:
    try:
        from .rendering import render_invoice, render_preview
    except ModuleNotFoundError as exc:
        if exc.name in ("fpdf", "PIL"):
            raise DependencyError(
                f"Missing dependency {exc.name!r}. Install the project with 'pip install .'."
            ) from exc
        raise
    return render_invoice, render_preview


class RenderPool:
    """Worker processes that run renders; rebuilt when a worker dies."""

    def __init__(self, workers: int) -> None:
        self.workers = workers
        self._lock = threading.Lock()
        self._executor: Optional[ProcessPoolExecutor] = None

    def _create(self) -> ProcessPoolExecutor:
        return ProcessPoolExecutor(max_workers=self.workers, mp_context=mp.get_context("spawn"))

    def executor(self) -> ProcessPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = self._create()
            return self._executor

    def restart(self, broken: ProcessPoolExecutor) -> ProcessPoolExecutor:
        with self._lock:
            if self._executor is broken:
                self._discard(broken)
                self._executor = None
            if self._executor is None:
                self._executor = self._create()
            return self._executor

    def submit(self, job: Renderer, payload: Dict[str, Any]) -> Future:
        executor = self.executor()
        try:
            return executor.submit(job, payload)
        except BrokenProcessPool:
            logger.warning("Render pool broken; restarting")
            return self.restart(executor).submit(job, payload)

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            self._discard(executor)

    @staticmethod
    def _discard(executor: ProcessPoolExecutor) -> None:
        try:
            executor.shutdown(wait=False, cancel_futures=True)
        except Exception:
            logger.warning("Render pool shutdown failed", exc_info=True)


RENDER_POOL = RenderPool(MAX_CONCURRENT_RENDERS)
RENDER_INFLIGHT_SEMAPHORE = threading.BoundedSemaphore(MAX_INFLIGHT_RENDERS)
atexit.register(RENDER_POOL.shutdown)


def submit_render_job(payload: Dict[str, Any], preview: bool = False) -> Future:
    render_invoice, render_preview = load_renderers()
    return RENDER_POOL.submit(render_preview if preview else render_invoice, payload)


def check_content_length(header: Optional[str], max_bytes: int) -> Tuple[int, Optional[ValidationError]]:
    """Parse a Content-Length header; returns the length or the error to send."""
    if header is None:
        return 0, error_response(411, "missing_content_length", "Content-Length header is required.")
    try:
        length = int(header)
    except ValueError:
        return 0, error_response(400, "invalid_content_length", "Content-Length must be an integer.")
    if length <= 0:
        return 0, error_response(400, "empty_body", "Request body cannot be empty.")
    if length > max_bytes:
        return 0, error_response(413, "payload_too_large", f"Body exceeds {max_bytes} bytes.")
    return length, None


def payload_items(payload: Dict[str, Any]) -> Any:
    record = payload.get("invoice")
    if not isinstance(record, dict):
        record = payload
    items = record.get("items")
    if items is None:
        items = record.get("invoice_items")
    return [] if items is None else items


def validate_invoice_payload(
    body: bytes,
    max_pages: int,
) -> Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, error_response(400, "invalid_encoding", "Body must be UTF-8 encoded JSON.")
    except json.JSONDecodeError as exc:
        return None, error_response(
            400, "invalid_json", f"{exc.msg} (line {exc.lineno}, column {exc.colno})"
        )

    if not isinstance(payload, dict):
        return None, error_response(400, "invalid_payload", "JSON root must be an object.")
    for key in ("invoice", "company", "settings"):
        if payload.get(key) is not None and not isinstance(payload[key], dict):
            return None, error_response(400, "invalid_payload", f"'{key}' must be an object.")

    items = payload_items(payload)
    if not isinstance(items, list):
        return None, error_response(400, "invalid_payload", "'items' must be an array.")
    if not all(isinstance(item, dict) for item in items):
        return None, error_response(400, "invalid_payload", "Every item must be an object.")

    pages = estimate_page_count(len(items))
    if pages > max_pages:
        return None, error_response(
            413,
            "invoice_too_large",
            f"Invoice would render {pages} pages; maximum is {max_pages}.",
            max_items=max_items_for_pages(max_pages),
        )
    return payload, None


class InvoiceHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG
    MAX_PAGES = MAX_PAGES_CONFIG

    def _write_response(self, status: int, content_type: str, body: bytes) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise
        return True

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        return self._write_response(status, "application/json", json.dumps(payload).encode("utf-8"))

    def _send_error(self, error: ValidationError) -> None:
        status, body = error
        self._send_json(status, body)

    def _read_body(self) -> Optional[bytes]:
        length, error = check_content_length(self.headers.get("Content-Length"), self.MAX_BODY_BYTES)
        if error is not None:
            self._send_error(error)
            return None
        try:
            return self.rfile.read(length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def _send_totals(self, payload: Dict[str, Any]) -> None:
        from .rendering import payload_totals

        self._send_json(200, {"totals": payload_totals(payload)})

    def _render(self, payload: Dict[str, Any], preview: bool) -> None:
        if not RENDER_INFLIGHT_SEMAPHORE.acquire(timeout=RENDER_QUEUE_TIMEOUT_MS / 1000.0):
            logger.warning("Render queue full; rejecting request")
            self._send_error(
                error_response(
                    503,
                    "server_busy",
                    "Render queue is full; retry shortly.",
                    retry_after_ms=RENDER_QUEUE_TIMEOUT_MS,
                    retry_after_seconds=max(1, (RENDER_QUEUE_TIMEOUT_MS + 999) // 1000),
                    max_concurrent_renders=MAX_CONCURRENT_RENDERS,
                    max_inflight_renders=MAX_INFLIGHT_RENDERS,
                )
            )
            return

        future: Optional[Future] = None
        try:
            future = submit_render_job(payload, preview=preview)
            result = future.result(timeout=RENDER_TIMEOUT_MS / 1000.0)
        except FutureTimeoutError:
            if future is not None:
                future.cancel()
            logger.warning("Render exceeded %s ms", RENDER_TIMEOUT_MS)
            self._send_error(
                error_response(504, "render_timeout", f"Render exceeded timeout of {RENDER_TIMEOUT_MS} ms.")
            )
            return
        except BrokenProcessPool:
            RENDER_POOL.restart(RENDER_POOL.executor())
            self._send_error(
                error_response(503, "render_pool_restarting", "Render worker pool restarted; retry shortly.")
            )
            return
        except Exception as exc:
            logger.exception("Invoice render failed")
            self._send_error(error_response(500, "render_failed", str(exc)))
            return
        finally:
            RENDER_INFLIGHT_SEMAPHORE.release()

        if preview:
            self._send_json(200, result)
        else:
            self._write_response(200, "application/pdf", result)

    def do_POST(self) -> None:
        if self.path not in PDF_PATHS + PREVIEW_PATHS + TOTALS_PATHS:
            self._send_error(error_response(404, "not_found", "Unsupported endpoint."))
            return

        body = self._read_body()
        if body is None:
            return
        payload, error = validate_invoice_payload(body, self.MAX_PAGES)
        if payload is None:
            self._send_error(error or error_response(400, "invalid_payload", "Invalid request body."))
            return

        if self.path in TOTALS_PATHS:
            self._send_totals(payload)
        else:
            self._render(payload, preview=self.path in PREVIEW_PATHS)

    def do_GET(self) -> None:
        if self.path in HEALTH_PATHS:
            self._send_json(200, {"status": "ok"})
        else:
            self._send_error(error_response(404, "not_found", "Unsupported endpoint."))

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if not is_client_disconnect(exc):
                raise

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class InvoiceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    load_renderers()
    RENDER_POOL.executor()
    server = InvoiceHTTPServer((host, port), InvoiceHandler)
    logger.info("Invoice render service listening on http://%s:%s", host, port)
    server.serve_forever()
