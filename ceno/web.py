"""
ceno.web: Flask integration for the request layer.

The proxy raises RequestFailure from a view; the registered handler turns it
into an ErrorState, dispatches it by the code's origin and returns the error
page that was written.
"""

from flask import Flask, Response, request

from ceno.codes import describe, is_cache_server_error
from ceno.dispatch import ErrorDispatcher, get_dispatcher
from ceno.errors import RequestFailure
from ceno.logger import get_logger
from ceno.state import ErrorState


def handle_failure(failure: RequestFailure, dispatcher: ErrorDispatcher) -> Response:
    """Answer a failed request with its error page."""
    response = Response(status=failure.http_status or 200)
    state = ErrorState(
        request=request,
        response=response,
        report_url=failure.report_url,
        extra=dict(failure.payload),
    )
    code = failure.code if failure.code is not None else 0

    if is_cache_server_error(code):
        handled = dispatcher.handle_lcs_error(code, failure.message, state)
    else:
        handled = dispatcher.handle_cc_error(code, failure.message, state)

    if not handled:
        get_logger().warn(
            f"Error {describe(code)} was not fully handled",
            code=code,
            stage="web",
            url=request.url,
        )
    return response


def register_error_handlers(app: Flask, dispatcher: ErrorDispatcher | None = None) -> None:
    """Install the RequestFailure handler on a Flask app."""

    @app.errorhandler(RequestFailure)
    def _request_failure(e: RequestFailure) -> Response:
        return handle_failure(e, dispatcher or get_dispatcher())
