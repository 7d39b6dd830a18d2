"""
ceno.dispatch: Handler registries and the two dispatch entry points.

Each error the CC is responsible for, and each error the LCS may send to the
CC, has a handler. Handlers take the handler context and the request's
ErrorState, perform their side effects (serve the error page, send a report,
try to fix the cause) and return True if everything went fine.

A code with no registered handler is handled as ERR_INVALID_ERROR.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from ceno.codes import ErrorCode, describe
from ceno.config import CenoConfig
from ceno.errors import StateError
from ceno.logger import CenoLogger, get_logger
from ceno.render import ErrorPageRenderer
from ceno.report import ErrorReporter
from ceno.state import ErrorState


class Remediation(str, Enum):
    """Background fixes a handler may attempt after serving the page."""
    DOWNLOAD_CONFIG = "download_config"
    DOWNLOAD_FEEDS_FILE = "download_feeds_file"
    DOWNLOAD_ARTICLES_FILE = "download_articles_file"
    DOWNLOAD_VIEWS = "download_views"
    HANDLE_LCS_REPORT = "handle_lcs_report"
    SHOW_FREENET_MONITOR = "show_freenet_monitor"
    SHOW_PEER_MONITOR = "show_peer_monitor"


# Hooks are run inline; long work should be handed off to a worker by the hook.
RemediationHook = Callable[[ErrorState], bool]


@dataclass(frozen=True)
class HandlerContext:
    renderer: ErrorPageRenderer
    reporter: ErrorReporter
    remediations: Mapping[Remediation, RemediationHook] = field(default_factory=dict)
    logger: CenoLogger = field(default_factory=get_logger)


Handler = Callable[[HandlerContext, ErrorState], bool]


def serve_error(ctx: HandlerContext, state: ErrorState) -> bool:
    """
    Prepare and serve the standard error page.

    The state must carry the request, the response, the code and the message.
    """
    try:
        request = state.require("request")
        response = state.require("response")
        code = state.require("code")
    except StateError as e:
        ctx.logger.error(str(e), code=state.code, stage="serve")
        return False

    ctx.renderer.execute(code, state.message or "", response, request)
    return True


def serve_unrecognized_error(ctx: HandlerContext, state: ErrorState, code: int) -> bool:
    """
    Serve the ERR_INVALID_ERROR page for a code no handler is registered for.

    The code is passed in rather than read from the state so that a code
    already recorded on the state is left alone.
    """
    try:
        request = state.require("request")
        response = state.require("response")
    except StateError as e:
        ctx.logger.error(str(e), code=code, stage="serve")
        return False

    ctx.renderer.execute_unrecognized(code, response, request)
    return True


def report_and_serve_error(ctx: HandlerContext, state: ErrorState) -> bool:
    """Report an undecodable LCS response, then serve the page whatever the outcome."""
    reported = ctx.reporter.report_decode_error(state)
    served = serve_error(ctx, state)
    return reported and served


def _run_remediation(ctx: HandlerContext, remediation: Remediation, state: ErrorState) -> bool:
    hook = ctx.remediations.get(remediation)
    if hook is None:
        return True
    try:
        ok = bool(hook(state))
    except Exception as e:
        ctx.logger.error(
            f"Remediation {remediation.value} raised: {e}",
            code=state.code,
            stage="remediation",
            handler=remediation.value,
            error_type=type(e).__name__,
        )
        return False
    if not ok:
        ctx.logger.warn(
            f"Remediation {remediation.value} did not succeed",
            code=state.code,
            stage="remediation",
            handler=remediation.value,
        )
    return ok


def serve_error_and_remediate(remediation: Remediation) -> Handler:
    """Build a handler that always serves the page and then tries a remediation."""

    def handler(ctx: HandlerContext, state: ErrorState) -> bool:
        served = serve_error(ctx, state)
        remediated = _run_remediation(ctx, remediation, state)
        return served and remediated

    handler.__name__ = f"serve_error_and_{remediation.value}"
    return handler


CC_ERROR_HANDLERS: Mapping[int, Handler] = MappingProxyType({
    ErrorCode.ERR_NO_CONFIG: serve_error_and_remediate(Remediation.DOWNLOAD_CONFIG),
    ErrorCode.ERR_MALFORMED_URL: serve_error,
    ErrorCode.ERR_NO_FEEDS_FILE: serve_error_and_remediate(Remediation.DOWNLOAD_FEEDS_FILE),
    ErrorCode.ERR_NO_ARTICLES_FILE: serve_error_and_remediate(Remediation.DOWNLOAD_ARTICLES_FILE),
    ErrorCode.ERR_CORRUPT_JSON: serve_error,
    ErrorCode.ERR_MALFORMED_STATUS_CHECK: serve_error,
    ErrorCode.ERR_NO_CONNECT_LCS: serve_error,
    ErrorCode.ERR_MALFORMED_LCS_RESPONSE: report_and_serve_error,
    ErrorCode.ERR_FROM_LCS: serve_error_and_remediate(Remediation.HANDLE_LCS_REPORT),
    ErrorCode.ERR_NO_CONNECT_RS: serve_error,
    ErrorCode.ERR_MISSING_VIEW: serve_error_and_remediate(Remediation.DOWNLOAD_VIEWS),
    ErrorCode.ERR_INVALID_ERROR: serve_error,
    ErrorCode.ERR_LCS_NOT_READY: serve_error,
})

LCS_ERROR_HANDLERS: Mapping[int, Handler] = MappingProxyType({
    ErrorCode.ERR_LCS_MALFORMED_URL: serve_error,
    ErrorCode.ERR_LCS_URL_DECODE: serve_error,
    ErrorCode.ERR_LCS_WILL_NOT_SERVE: serve_error,
    ErrorCode.ERR_LCS_LOOKUP_FAILURE: serve_error,
    ErrorCode.ERR_LCS_INTERNAL: serve_error,
    ErrorCode.ERR_LCS_WAIT_FREENET: serve_error_and_remediate(Remediation.SHOW_FREENET_MONITOR),
    ErrorCode.ERR_LCS_WAIT_PEERS: serve_error_and_remediate(Remediation.SHOW_PEER_MONITOR),
})

class ErrorDispatcher:
    """Routes errors to their handlers. Safe to share between request threads."""

    def __init__(
        self,
        config: CenoConfig,
        renderer: ErrorPageRenderer | None = None,
        reporter: ErrorReporter | None = None,
        remediations: Mapping[Remediation, RemediationHook] | None = None,
    ):
        self._config = config
        self._logger = get_logger()
        self._context = HandlerContext(
            renderer=renderer or ErrorPageRenderer(config),
            reporter=reporter or ErrorReporter(config),
            remediations=MappingProxyType(dict(remediations or {})),
            logger=self._logger,
        )

    @property
    def context(self) -> HandlerContext:
        return self._context

    def _dispatch(
        self,
        registry: Mapping[int, Handler],
        registry_name: str,
        code: int,
        message: str,
        state: ErrorState,
    ) -> bool:
        state.setdefault_code(code)
        state.setdefault_message(message)

        handler = registry.get(code)
        if handler is None:
            self._logger.warn(
                f"No {registry_name} handler for {describe(code)}, handling as invalid error",
                code=code,
                stage="dispatch",
                handler=serve_unrecognized_error.__name__,
            )
            return serve_unrecognized_error(self._context, state, code)

        self._logger.debug(
            f"Dispatching {registry_name} error",
            code=code,
            stage="dispatch",
            handler=handler.__name__,
        )
        return handler(self._context, state)

    def handle_cc_error(self, code: int, message: str, state: ErrorState) -> bool:
        """
        Handle an error occurring in the CC. This terminates the request.

        Args:
            code: The error code identifying the error that occurred
            message: A message to output with the error page, if any
            state: State of the request at the time of the error

        Returns:
            True if the error page was served and any background work went fine
        """
        return self._dispatch(CC_ERROR_HANDLERS, "cc", code, message, state)

    def handle_lcs_error(self, code: int, message: str, state: ErrorState) -> bool:
        """Handle an error reported by the LCS. This terminates the request."""
        return self._dispatch(LCS_ERROR_HANDLERS, "lcs", code, message, state)

    def close(self) -> None:
        self._context.reporter.close()


_dispatcher: ErrorDispatcher | None = None


def get_dispatcher() -> ErrorDispatcher:
    """Get the global dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = ErrorDispatcher(CenoConfig())
    return _dispatcher


def configure_dispatcher(
    config: CenoConfig,
    remediations: Mapping[Remediation, RemediationHook] | None = None,
) -> ErrorDispatcher:
    """Configure and return the global dispatcher."""
    global _dispatcher
    _dispatcher = ErrorDispatcher(config, remediations=remediations)
    return _dispatcher


def handle_cc_error(code: int, message: str, state: ErrorState) -> bool:
    return get_dispatcher().handle_cc_error(code, message, state)


def handle_lcs_error(code: int, message: str, state: ErrorState) -> bool:
    return get_dispatcher().handle_lcs_error(code, message, state)
