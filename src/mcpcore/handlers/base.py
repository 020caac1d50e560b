"""Shared request plumbing for the MCP component handlers.

BaseHandler carries parameter validation, response shaping, content
formatting, exception translation and logging so that the concrete
handlers only implement protocol semantics.

Handlers hold no per-request state; one instance serves every request and
may be used from several threads as long as the registry is safe for
concurrent reads.
"""

from __future__ import annotations

import json
import traceback
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, ClassVar

import jsonschema
from pydantic import BaseModel

from mcpcore.errors import INTERNAL_ERROR, ProtocolException
from mcpcore.observability import get_logger, is_debug_mode
from mcpcore.observability.logging import sanitize_for_logging as _sanitize
from mcpcore.pagination import DEFAULT_PAGE_SIZE, paginate
from mcpcore.registry import ComponentRegistry

_CURSOR_RULES: dict[str, Any] = {
    "type": "object",
    "properties": {"cursor": {"type": ["string", "null"]}},
}

_CURSOR_MESSAGES = {"cursor.type": "The cursor must be a string"}


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def encode_json(value: Any, pretty: bool = False) -> str:
    """JSON-encode handler output; pydantic models are dumped, unknown objects use ``str()``."""
    if pretty:
        return json.dumps(value, indent=4, default=_json_default, ensure_ascii=False)
    return json.dumps(value, separators=(",", ":"), default=_json_default, ensure_ascii=False)


class BaseHandler(ABC):
    """Base class for the tools, resources and prompts handlers.

    Subclasses declare ``supported_methods`` and implement
    ``_handle_method``.

    Attributes:
        registry: Component registry consulted on every request
        page_size: Default page size for */list operations
    """

    supported_methods: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        registry: ComponentRegistry,
        debug: bool | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.registry = registry
        self.page_size = page_size
        self._debug = is_debug_mode() if debug is None else debug
        self._logger = get_logger(f"mcpcore.handlers.{self.handler_name}")
        if self._debug:
            self.log_debug("Handler initialized", supported_methods=list(self.supported_methods))

    @property
    def handler_name(self) -> str:
        return type(self).__name__

    @property
    def debug(self) -> bool:
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = bool(value)

    def supports_method(self, method: str) -> bool:
        return method in self.supported_methods

    def get_supported_methods(self) -> list[str]:
        return list(self.supported_methods)

    def handle(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Handle one MCP method call.

        Protocol failures (unknown method, unknown component, invalid
        params) propagate as ProtocolException. Any other exception is
        turned into an in-band error result by ``handle_exception``.

        Raises:
            ProtocolException: For protocol-level failures.
        """
        params = params or {}
        context = context or {}
        if not self.supports_method(method):
            raise ProtocolException.unsupported_method(method)

        self.log_debug(
            "Handling request",
            method=method,
            params=self.sanitize_for_logging(params),
            request_id=context.get("request_id"),
        )
        try:
            return self._handle_method(method, params, context)
        except ProtocolException:
            raise
        except Exception as e:
            return self.handle_exception(e, method, context)

    @abstractmethod
    def _handle_method(
        self, method: str, params: dict[str, Any], context: dict[str, Any]
    ) -> dict[str, Any]:
        """Route a supported method to its operation."""

    # --- Validation ---

    def validate_request(
        self,
        params: dict[str, Any],
        rules: dict[str, Any],
        messages: dict[str, str] | None = None,
    ) -> None:
        """Validate ``params`` against a JSON Schema.

        Args:
            params: Request params.
            rules: JSON Schema describing the params object. An empty schema
                accepts anything.
            messages: Overrides keyed by ``"<field>.<keyword>"`` (e.g.
                ``"cursor.type"``) or by ``"<field>"``.

        Raises:
            ProtocolException: -32602 with ``"Invalid parameters: "`` followed
                by the comma-joined failure messages.
        """
        if not rules:
            return
        messages = messages or {}
        validator_cls = jsonschema.validators.validator_for(rules)
        validator = validator_cls(rules)

        failures: list[tuple[str, str, str]] = []
        seen_required: set[str] = set()
        for error in sorted(validator.iter_errors(params), key=lambda e: list(map(str, e.absolute_path))):
            path = ".".join(str(part) for part in error.absolute_path)
            if error.validator == "required":
                # one error per missing property; report them together in declared order
                if path in seen_required:
                    continue
                seen_required.add(path)
                instance = error.instance if isinstance(error.instance, dict) else {}
                for field_name in error.validator_value:
                    if field_name not in instance:
                        full = f"{path}.{field_name}" if path else str(field_name)
                        failures.append((full, "required", f"The {full} field is required"))
                continue
            field_name = path or "params"
            failures.append((field_name, str(error.validator), f"{field_name}: {error.message}"))

        if not failures:
            return

        texts = [
            messages.get(f"{field_name}.{keyword}") or messages.get(field_name) or default
            for field_name, keyword, default in failures
        ]
        raise ProtocolException.invalid_params(
            "Invalid parameters: " + ", ".join(texts),
            data={"errors": texts},
        )

    def validate_required_params(self, params: dict[str, Any], required: Sequence[str]) -> None:
        """Raise -32602 listing every key of ``required`` absent from ``params``."""
        missing = [key for key in required if key not in params]
        if missing:
            raise ProtocolException.invalid_params(
                f"Missing required parameters: {', '.join(missing)}"
            )

    # --- Responses ---

    def create_success_response(
        self, result: dict[str, Any], context: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Return ``result``, plus ``_meta`` when ``context["add_metadata"]`` is set."""
        if not context or not context.get("add_metadata"):
            return result
        meta: dict[str, Any] = {
            "handler": self.handler_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if context.get("request_id") is not None:
            meta["request_id"] = context["request_id"]
        return {**result, "_meta": meta}

    def create_error_response(
        self, message: str, code: int = INTERNAL_ERROR, data: Any = None
    ) -> dict[str, Any]:
        error: dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"error": error}

    def handle_exception(
        self, exc: Exception, method: str, context: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Translate an exception into an error-shaped result.

        ProtocolException passes through with its code, message and data.
        Anything else becomes ``"Internal server error"``; exception details
        are attached only in debug mode.
        """
        request_id = (context or {}).get("request_id")
        if isinstance(exc, ProtocolException):
            self.log_warning(
                "Protocol error", method=method, code=exc.code, error=exc.message, request_id=request_id
            )
            return self.create_error_response(exc.message, exc.code, exc.data)

        self.log_error(
            "Unexpected error",
            method=method,
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
        )
        data = None
        if self.debug:
            frames = traceback.extract_tb(exc.__traceback__)
            last = frames[-1] if frames else None
            data = {
                "exception_type": type(exc).__name__,
                "file": last.filename if last else None,
                "line": last.lineno if last else None,
                "trace": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            }
        return self.create_error_response("Internal server error", INTERNAL_ERROR, data)

    # --- Helpers ---

    def sanitize_for_logging(self, params: dict[str, Any]) -> dict[str, Any]:
        return _sanitize(params)

    def format_content(self, content: Any, type: str = "text") -> dict[str, Any]:
        """Normalize handler output into an MCP content block.

        - ``text``: strings as-is, anything else as compact JSON
        - ``json``: pretty JSON for objects and arrays, compact for scalars
        - ``resource``: ``{"type": "resource", "resource": content}``

        Unknown types behave like ``text``.
        """
        if type == "json":
            pretty = isinstance(content, (dict, list, tuple, BaseModel))
            return {"type": "text", "text": encode_json(content, pretty=pretty)}
        if type == "resource":
            return {"type": "resource", "resource": content}
        text = content if isinstance(content, str) else encode_json(content)
        return {"type": "text", "text": text}

    def paginate_definitions(
        self, definitions: list[dict[str, Any]], params: dict[str, Any]
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Validate the ``cursor`` param and slice ``definitions`` to the requested page."""
        self.validate_request(params, _CURSOR_RULES, _CURSOR_MESSAGES)
        return paginate(definitions, params.get("cursor"), self.page_size)

    # --- Logging ---

    def _prefixed(self, message: str) -> str:
        return f"[{self.handler_name}] {message}"

    def log_info(self, message: str, **context: Any) -> None:
        self._logger.info(self._prefixed(message), **context)

    def log_debug(self, message: str, **context: Any) -> None:
        if self._debug:
            self._logger.debug(self._prefixed(message), **context)

    def log_warning(self, message: str, **context: Any) -> None:
        self._logger.warning(self._prefixed(message), **context)

    def log_error(self, message: str, **context: Any) -> None:
        self._logger.error(self._prefixed(message), **context)
