"""Client for the remote structured-log collector.

Events are queued without blocking and shipped by a background worker thread.
A failed delivery is written to the local log and never reaches the caller
that produced the event.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from queue import Empty, Full, Queue
from typing import Optional, Union
import logging
import threading

import httpx

from shorturls.core.config import Settings
from shorturls.core.errors import LoggingDeliveryFailed

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500


class Stack(str, Enum):
    BACKEND = "backend"
    FRONTEND = "frontend"


class Level(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class BackendPackage(str, Enum):
    CACHE = "cache"
    CONTROLLER = "controller"
    CRON_JOB = "cron_job"
    DB = "db"
    DOMAIN = "domain"
    HANDLER = "handler"
    REPOSITORY = "repository"
    ROUTE = "route"
    SERVICE = "service"


class FrontendPackage(str, Enum):
    API = "api"
    COMPONENT = "component"
    HOOK = "hook"
    PAGE = "page"
    STATE = "state"
    STYLE = "style"


Package = Union[BackendPackage, FrontendPackage]

PACKAGES = {Stack.BACKEND: BackendPackage, Stack.FRONTEND: FrontendPackage}
DEFAULT_PACKAGES = {Stack.BACKEND: BackendPackage.HANDLER, Stack.FRONTEND: FrontendPackage.COMPONENT}


def _normalize(value) -> str:
    if isinstance(value, Enum):
        return value.value
    return str(value).strip().lower()


def coerce_stack(value) -> Stack:
    try:
        return Stack(_normalize(value))
    except ValueError:
        logger.warning("Invalid stack '%s', using backend", value)
        return Stack.BACKEND


def coerce_level(value) -> Level:
    try:
        return Level(_normalize(value))
    except ValueError:
        logger.warning("Invalid level '%s', using info", value)
        return Level.INFO


def coerce_package(stack: Stack, value) -> Package:
    """Map ``value`` onto the stack's vocabulary, degrading to its default package."""
    enum_cls = PACKAGES[stack]
    try:
        return enum_cls(_normalize(value))
    except ValueError:
        fallback = DEFAULT_PACKAGES[stack]
        logger.warning(
            "Invalid package '%s' for stack '%s', using '%s'", value, stack.value, fallback.value
        )
        return fallback


def level_for_record(levelno: int) -> Level:
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


@dataclass(frozen=True)
class LogEvent:
    stack: Stack
    level: Level
    package: Package
    message: str

    def payload(self) -> dict:
        return {
            "stack": self.stack.value,
            "level": self.level.value,
            "package": self.package.value,
            "message": self.message[:MAX_MESSAGE_LENGTH],
        }

    def fallback_line(self) -> str:
        ts = datetime.now(timezone.utc).isoformat()
        return (
            f"[FALLBACK LOG] {ts} [{self.stack.value.upper()}] "
            f"{self.level.value.upper()}:{self.package.value} - {self.message}"
        )


def build_event(stack, level, package, message) -> LogEvent:
    stack = coerce_stack(stack)
    return LogEvent(
        stack=stack,
        level=coerce_level(level),
        package=coerce_package(stack, package),
        message=str(message),
    )


_STOP = object()


class CollectorClient:
    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = 5.0,
        queue_size: int = 1000,
        http_client: Optional[httpx.Client] = None,
    ):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.queue: Queue = Queue(maxsize=queue_size)
        self._http = http_client or httpx.Client(timeout=timeout)
        self._worker: Optional[threading.Thread] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["CollectorClient"]:
        if not settings.LOG_COLLECTOR_URL:
            return None
        return cls(
            settings.LOG_COLLECTOR_URL,
            token=settings.ACCESS_TOKEN,
            timeout=settings.LOG_COLLECTOR_TIMEOUT,
            queue_size=settings.LOG_QUEUE_SIZE,
        )

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self):
        if self.running:
            return
        self._worker = threading.Thread(target=self._run, name="log-collector", daemon=True)
        self._worker.start()

    def close(self, timeout: float = 10.0):
        """Deliver what is already queued, then stop the worker."""
        if self.running:
            self.queue.put(_STOP)
            self._worker.join(timeout=timeout)
        self._worker = None
        self._http.close()

    def log(self, stack, level, package, message) -> LogEvent:
        event = build_event(stack, level, package, message)
        self.submit(event)
        return event

    def submit(self, event: LogEvent) -> bool:
        """Queue ``event`` without blocking; returns False if it was dropped."""
        try:
            self.queue.put_nowait(event)
        except Full:
            logger.warning(event.fallback_line())
            return False
        return True

    def deliver(self, event: LogEvent) -> int:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self._http.post(
                self.url, json=event.payload(), headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise LoggingDeliveryFailed(str(exc)) from exc
        return response.status_code

    def _run(self):
        while True:
            try:
                event = self.queue.get(timeout=1)
            except Empty:
                continue
            try:
                if event is _STOP:
                    return
                self._ship(event)
            finally:
                self.queue.task_done()

    def _ship(self, event: LogEvent):
        try:
            status = self.deliver(event)
            logger.debug("Log delivered (%s)", status)
        except LoggingDeliveryFailed as exc:
            logger.error("Logging failed: %s", exc)
            logger.warning(event.fallback_line())


class CollectorHandler(logging.Handler):
    """Forwards stdlib log records from the service to a :class:`CollectorClient`."""

    IGNORED_LOGGERS = (__name__, "httpx", "httpcore")

    def __init__(self, client: CollectorClient, stack=Stack.BACKEND, level=logging.NOTSET):
        super().__init__(level)
        self.client = client
        self.stack = coerce_stack(stack)

    def emit(self, record: logging.LogRecord):
        if record.name.startswith(self.IGNORED_LOGGERS):
            return
        try:
            package = getattr(record, "package", DEFAULT_PACKAGES[self.stack].value)
            event = LogEvent(
                stack=self.stack,
                level=level_for_record(record.levelno),
                package=coerce_package(self.stack, package),
                message=record.getMessage(),
            )
            self.client.submit(event)
        except Exception:
            self.handleError(record)
