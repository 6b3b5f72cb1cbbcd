"""Fire-and-forget log shipping to Logstash.

Every log call mirrors a colored line to stdout on the caller's thread and
hands the entry to a worker pool that POSTs it as JSON to the Logstash HTTP
input. Delivery is best-effort: failures are reported on the local structlog
stream and dropped, never retried and never raised to the caller.
"""

from __future__ import annotations

import inspect
import json
import os
import platform
import socket
import sys
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from time import time_ns
from typing import Any, TextIO

import httpx
import structlog

from app.config import LOGSTASH_URL, SERVICE_NAME, Settings, get_settings


Fields = dict[str, Any]

_THIS_FILE = os.path.normcase(__file__)

_RESET = "\033[0m"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


_LEVEL_COLORS = {
    LogLevel.ERROR.value: "\033[31m",
    LogLevel.WARN.value: "\033[33m",
    LogLevel.INFO.value: "\033[32m",
    LogLevel.DEBUG.value: "\033[36m",
}


def _level_name(level: LogLevel | str) -> str:
    """Wire and console text for a level; levels outside LogLevel pass through."""

    return level.value if isinstance(level, LogLevel) else str(level)


class LoggerNotInitializedError(RuntimeError):
    """Raised when the shared shipper is used before ``init_logger()``."""


def _runtime_version() -> str:
    return f"python{platform.python_version()}"


def rfc3339_nano(ns: int) -> str:
    """Format a UTC epoch in nanoseconds as RFC3339 with trimmed nanosecond fraction."""

    seconds, nanos = divmod(ns, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        stamp += "." + f"{nanos:09d}".rstrip("0")
    return stamp + "Z"


def _find_caller() -> str | None:
    """Return ``file:line`` of the first frame outside this module."""

    frame = inspect.currentframe()
    try:
        while frame is not None and os.path.normcase(frame.f_code.co_filename) == _THIS_FILE:
            frame = frame.f_back
        if frame is None:
            return None
        return f"{frame.f_code.co_filename}:{frame.f_lineno}"
    finally:
        del frame


@dataclass(frozen=True)
class ShipperConfig:
    endpoint: str
    service_name: str
    environment: str
    hostname: str
    server_ip: str
    runtime_version: str = field(default_factory=_runtime_version)
    timeout: float = 5.0
    max_idle_connections: int = 100
    idle_timeout: float = 90.0
    max_workers: int = 100

    @classmethod
    def from_settings(cls, settings: Settings) -> ShipperConfig:
        return cls(
            endpoint=LOGSTASH_URL,
            service_name=SERVICE_NAME,
            environment=settings.environment,
            hostname=socket.gethostname(),
            server_ip=settings.server_ip,
        )


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    service: str
    message: str
    fields: Fields
    environment: str
    host: str
    server_ip: str
    runtime_version: str

    def to_document(self) -> dict[str, Any]:
        return {
            "@timestamp": self.timestamp,
            "level": self.level,
            "service": self.service,
            "message": self.message,
            "fields": self.fields,
            "environment": self.environment,
            "host": self.host,
            "server_ip": self.server_ip,
            "go_version": self.runtime_version,
        }


class LogShipper:
    """Builds log entries and ships them to Logstash without blocking the caller."""

    def __init__(
        self,
        config: ShipperConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        error_log: Any | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.Client(
            transport=transport,
            timeout=config.timeout,
            limits=httpx.Limits(
                max_connections=None,
                max_keepalive_connections=config.max_idle_connections,
                keepalive_expiry=config.idle_timeout,
            ),
        )
        self._executor = ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="log-shipper")
        self._error_log = error_log if error_log is not None else structlog.get_logger("log_shipper")
        self._stream = stream
        self._lock = Lock()
        self._pending: set[Future[None]] = set()

    def build_entry(
        self,
        level: LogLevel | str,
        message: str,
        fields: Fields | None = None,
        caller: str | None = None,
    ) -> LogEntry:
        merged: Fields = dict(fields) if fields is not None else {}
        if caller is None:
            caller = _find_caller()
        if caller is not None:
            merged["caller"] = caller

        return LogEntry(
            timestamp=rfc3339_nano(time_ns()),
            level=_level_name(level),
            service=self.config.service_name,
            message=message,
            fields=merged,
            environment=self.config.environment,
            host=self.config.hostname,
            server_ip=self.config.server_ip,
            runtime_version=self.config.runtime_version,
        )

    def log(self, level: LogLevel | str, message: str, fields: Fields | None = None) -> Future[None] | None:
        """Ship one entry in the background and mirror it to the console.

        Returns the dispatch future, or ``None`` if it could not be scheduled.
        """

        entry = self.build_entry(level, message, fields)
        future: Future[None] | None = None
        try:
            future = self._executor.submit(self._ship, entry)
        except RuntimeError as exc:
            # Executor already shut down.
            self._error_log.error("log_delivery_failed", stage="submit", error=str(exc))
        else:
            with self._lock:
                self._pending.add(future)
            future.add_done_callback(self._on_done)

        self._mirror_to_console(_level_name(level), message, fields)
        return future

    def info(self, message: str, fields: Fields | None = None) -> Future[None] | None:
        return self.log(LogLevel.INFO, message, fields)

    def warn(self, message: str, fields: Fields | None = None) -> Future[None] | None:
        return self.log(LogLevel.WARN, message, fields)

    def error(self, message: str, fields: Fields | None = None) -> Future[None] | None:
        return self.log(LogLevel.ERROR, message, fields)

    def debug(self, message: str, fields: Fields | None = None) -> Future[None] | None:
        if self.config.environment != "development":
            return None
        return self.log(LogLevel.DEBUG, message, fields)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for in-flight dispatches. Returns False if some are still running."""

        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait_for_futures(pending, timeout=timeout)
        return not not_done

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
        self._client.close()

    def _on_done(self, future: Future[None]) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._error_log.error("log_delivery_failed", stage="dispatch", error=repr(exc))

    def _ship(self, entry: LogEntry) -> None:
        try:
            body = json.dumps(entry.to_document(), allow_nan=False)
        except (TypeError, ValueError) as exc:
            self._error_log.error("log_delivery_failed", stage="serialize", error=str(exc))
            return

        try:
            request = self._client.build_request(
                "POST",
                self.config.endpoint,
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            self._error_log.error("log_delivery_failed", stage="request", error=str(exc))
            return

        try:
            response = self._client.send(request)
        except httpx.HTTPError as exc:
            self._error_log.error("log_delivery_failed", stage="transport", error=str(exc))
            return

        if response.status_code >= 400:
            self._error_log.error("log_delivery_failed", stage="response", status_code=response.status_code)

    def _mirror_to_console(self, level: str, message: str, fields: Fields | None) -> None:
        try:
            color = _LEVEL_COLORS.get(level, _RESET)
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            line = f"{color}[{timestamp}] {level:<5} {message}{_RESET}"
            if fields:
                line += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
            stream = self._stream if self._stream is not None else sys.stdout
            print(line, file=stream)
        except Exception:
            # The console mirror must never fail the request path.
            pass


_instance: LogShipper | None = None
_instance_lock = Lock()


def init_logger(
    config: ShipperConfig | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    error_log: Any | None = None,
) -> LogShipper:
    """Create the shared shipper once; later calls return it unchanged."""

    global _instance
    if _instance is not None:
        return _instance

    with _instance_lock:
        if _instance is None:
            shipper = LogShipper(
                config or ShipperConfig.from_settings(get_settings()),
                transport=transport,
                error_log=error_log,
            )
            shipper.info(
                "Logger initialized",
                {
                    "server_ip": shipper.config.server_ip,
                    "logstash_url": shipper.config.endpoint,
                    "environment": shipper.config.environment,
                    "hostname": shipper.config.hostname,
                },
            )
            _instance = shipper
    return _instance


def get_logger() -> LogShipper:
    if _instance is None:
        raise LoggerNotInitializedError("Logger not initialized. Call init_logger() first")
    return _instance


def reset_logger() -> None:
    """Close and forget the shared shipper (used by tests)."""

    global _instance
    with _instance_lock:
        shipper, _instance = _instance, None
    if shipper is not None:
        shipper.close()


def info(message: str, fields: Fields | None = None) -> Future[None] | None:
    return get_logger().info(message, fields)


def warn(message: str, fields: Fields | None = None) -> Future[None] | None:
    return get_logger().warn(message, fields)


def error(message: str, fields: Fields | None = None) -> Future[None] | None:
    return get_logger().error(message, fields)


def debug(message: str, fields: Fields | None = None) -> Future[None] | None:
    return get_logger().debug(message, fields)
