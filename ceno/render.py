"""
ceno.render: The user-facing error page.

Renders the localized error template for a code. Two things can go wrong on
the way, and neither is allowed to fail the request:

- the code has no advice entry: the page is rendered once more for
  ERR_INVALID_ERROR with a message naming the unrecognized code;
- the template cannot be loaded or rendered: a plain-text page naming the
  missing view is sent instead of HTML.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)
from markupsafe import Markup

from ceno.codes import ErrorCode
from ceno.config import CenoConfig
from ceno.errors import ViewMissingError
from ceno.i18n import Translator, tfunc
from ceno.logger import get_logger
from ceno.tables import AUTO_REFRESHING_ERROR_PAGES, ERROR_ADVICE, advice_for, should_refresh

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

# Catalog entries holding trusted markup, keyed by template variable.
PAGE_TEXT_KEYS = {
    "NoBundlePrepared": "no_bundle_prepared_html",
    "YouAskedFor": "you_asked_for_html",
    "ErrorWeGot": "error_we_got_html",
    "WhatYouCanDo": "what_you_can_do_html",
    "Retry": "retry_html",
    "Report": "report_html",
}


@dataclass(frozen=True)
class RenderedPage:
    code: int
    content_type: str
    body: str
    degraded: bool = False

    def write_to(self, response: Any) -> None:
        """Emit the page on a werkzeug-style response object."""
        response.content_type = self.content_type
        response.set_data(self.body)


class ErrorPageRenderer:
    """Builds error pages from the error template and the translation catalog."""

    def __init__(
        self,
        config: CenoConfig,
        advice: Mapping[int, str] = ERROR_ADVICE,
        refresh: Mapping[int, bool] = AUTO_REFRESHING_ERROR_PAGES,
        environ: Mapping[str, str] | None = None,
    ):
        self._config = config
        self._advice = advice
        self._refresh = refresh
        self._environ = environ
        self._logger = get_logger()
        self._env = Environment(
            loader=FileSystemLoader(config.views.directory),
            autoescape=select_autoescape(["html", "htm"]),
            auto_reload=True,
        )

    @property
    def template_name(self) -> str:
        return self._config.views.error_template

    def translator(self) -> Translator:
        return tfunc(self._config, self._environ)

    def load_template(self) -> Template:
        """Load the error template, raising ViewMissingError if it is unusable."""
        try:
            return self._env.get_template(self.template_name)
        except TemplateNotFound:
            raise ViewMissingError(
                stage="render",
                message=f"Template not found: {self.template_name}",
                payload={"directory": self._config.views.directory},
            )
        except TemplateSyntaxError as e:
            raise ViewMissingError(
                stage="render",
                message=f"Template cannot be parsed: {self.template_name}",
                payload={"line": e.lineno, "error": e.message},
            )
        except (OSError, UnicodeDecodeError, TemplateError) as e:
            raise ViewMissingError(
                stage="render",
                message=f"Template cannot be read: {self.template_name}",
                payload={"error_type": type(e).__name__, "error": str(e)},
            )

    def fill_template(self, template: Template, context: dict[str, Any]) -> str:
        """Render the loaded template, raising ViewMissingError if rendering fails."""
        try:
            return template.render(context)
        except Exception as e:
            raise ViewMissingError(
                stage="render",
                message=f"Template failed to render: {self.template_name}",
                payload={"error_type": type(e).__name__, "error": str(e)},
            )

    def render(self, code: int, message: str, url: str) -> RenderedPage:
        """Render the page for a code, degrading instead of raising."""
        return self._render(code, message, url, self.translator(), redirected=False)

    def render_unrecognized(self, code: int, url: str) -> RenderedPage:
        """Render the invalid-error page explaining that a code is not recognized."""
        T = self.translator()
        return self._render(
            ErrorCode.ERR_INVALID_ERROR,
            self._unrecognized_message(T, code),
            url,
            T,
            redirected=True,
        )

    def execute(self, code: int, message: str, response: Any, request: Any) -> None:
        """Render the page for a code and write it to the response."""
        page = self.render(code, message, str(request.url))
        page.write_to(response)

    def execute_unrecognized(self, code: int, response: Any, request: Any) -> None:
        page = self.render_unrecognized(code, str(request.url))
        page.write_to(response)

    @staticmethod
    def _unrecognized_message(T: Translator, code: int) -> str:
        return T("unrecognized_error_code", {"ErrCode": int(code)})

    def _render(
        self,
        code: int,
        message: str,
        url: str,
        T: Translator,
        redirected: bool,
    ) -> RenderedPage:
        advice = advice_for(code, self._advice)
        if advice is None:
            unrecognized = self._unrecognized_message(T, code)
            if redirected:
                # The fallback code is unmapped too; stop here.
                self._logger.error(
                    "Fallback error code has no advice entry",
                    code=code,
                    stage="render",
                )
                return RenderedPage(code, TEXT_CONTENT_TYPE, unrecognized, degraded=True)
            self._logger.warn("Unrecognized error code", code=code, stage="render")
            return self._render(
                ErrorCode.ERR_INVALID_ERROR, unrecognized, url, T, redirected=True
            )

        context = {
            "Url": url,
            "Error": message,
            "ErrorCode": int(code),
            "ShouldRefresh": str(should_refresh(code, self._refresh)).lower(),
            "Advice": T(advice) if advice else "",
            "ContactInfo": self._config.contact.email,
        }
        for name, key in PAGE_TEXT_KEYS.items():
            context[name] = Markup(T(key))

        try:
            body = self.fill_template(self.load_template(), context)
        except ViewMissingError as e:
            self._logger.error(str(e), code=code, stage="render", **e.payload)
            body = T("missing_view", {"View": self.template_name})
            return RenderedPage(code, TEXT_CONTENT_TYPE, body, degraded=True)

        return RenderedPage(code, HTML_CONTENT_TYPE, body)
