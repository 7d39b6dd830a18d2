"""
ceno.report: Reporting failures to an upstream endpoint.

Reports are a JSON POST of ``{"error": <message>}``. The endpoint accepts a
report only by answering 200; every other outcome, including transport
failures, turns into False after being logged.
"""

from typing import Any

import requests

from ceno.config import CenoConfig
from ceno.errors import CenoError, ReportError, StateError, TransportError
from ceno.logger import get_logger
from ceno.state import ErrorState

# Handler name carried on report log lines.
REPORT_HANDLER = "report_decode_error"


class ErrorReporter:
    """Sends error reports over HTTP."""

    def __init__(self, config: CenoConfig, session: requests.Session | None = None):
        self._timeout = config.report.timeout_seconds
        self._session = session or requests.Session()
        self._logger = get_logger()

    def _post_once(self, url: str, payload: dict[str, Any], code: int | None) -> requests.Response:
        """POST a JSON payload once, mapping requests failures to TransportError."""
        stage = "report"
        try:
            return self._session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout:
            raise TransportError(
                stage=stage,
                message=f"Request timeout: {url}",
                code=code,
                payload={"url": url},
            )
        except requests.exceptions.ConnectionError:
            raise TransportError(
                stage=stage,
                message=f"Connection error: {url}",
                code=code,
                payload={"url": url},
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(
                stage=stage,
                message=f"Request error: {e}",
                code=code,
                payload={"url": url},
                retryable=False,
            )

    def send(self, url: str, message: str, code: int | None = None) -> None:
        """Send one report, raising a CenoError unless it was accepted."""
        response = self._post_once(url, {"error": message}, code)
        if response.status_code != 200:
            raise ReportError(
                stage="report",
                message=f"Report rejected with status {response.status_code}",
                code=code,
                http_status=response.status_code,
                payload={"url": url},
            )

    def report_decode_error(self, state: ErrorState) -> bool:
        """
        Report that the response from the LCS could not be decoded.

        Args:
            state: Must carry the error message and the URL to report to

        Returns:
            True if the endpoint accepted the report with a 200
        """
        try:
            url = state.require("report_url")
            self.send(url, state.message or "", state.code)
        except StateError as e:
            self._logger.error(str(e), code=state.code, stage="report", handler=REPORT_HANDLER)
            return False
        except CenoError as e:
            self._logger.warn(
                f"Error report not delivered: {e.message}",
                code=state.code,
                stage="report",
                handler=REPORT_HANDLER,
                error=e.to_dict(),
            )
            return False

        self._logger.info(
            "Error report delivered", code=state.code, stage="report", handler=REPORT_HANDLER, url=url
        )
        return True

    def close(self) -> None:
        self._session.close()

