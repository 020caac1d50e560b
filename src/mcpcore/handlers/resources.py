"""resources/list, resources/templates/list and resources/read."""

from __future__ import annotations

from typing import Any

from mcpcore.components import McpResource, as_resource, component_label
from mcpcore.errors import INTERNAL_ERROR, ComponentNotInvocableError, ProtocolException
from mcpcore.handlers.base import BaseHandler, encode_json
from mcpcore.protocol import (
    DEFAULT_MIME_TYPE,
    ResourceDefinition,
    ResourceTemplateDefinition,
)
from mcpcore.registry import ComponentEntry, ComponentType

_READ_RULES: dict[str, Any] = {
    "type": "object",
    "properties": {"uri": {"type": "string"}},
}

_READ_MESSAGES = {"uri.type": "The resource uri must be a string"}

# Keys that mark a dict as a content item that only lacks its "type"
_PARTIAL_CONTENT_KEYS = ("text", "uri", "mimeType")


class ResourceHandler(BaseHandler):
    """Handler for the resources family.

    Resources are addressed by URI. ``resources/read`` scans every
    registered resource and compares its resolved URI, so the registry name
    only matters for the ``resource://<name>`` fallback.

    Read failures are reported in-band as ``{"error": {...}}``.
    """

    supported_methods = ("resources/list", "resources/templates/list", "resources/read")

    def _handle_method(
        self, method: str, params: dict[str, Any], context: dict[str, Any]
    ) -> dict[str, Any]:
        if method == "resources/list":
            return self.list_resources(params, context)
        if method == "resources/templates/list":
            return self.list_templates(params, context)
        return self.read_resource(params, context)

    def list_resources(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        definitions = [
            self.build_definition(name, entry)
            for name, entry in self.registry.all(ComponentType.RESOURCE).items()
        ]
        page, next_cursor = self.paginate_definitions(definitions, params)
        result: dict[str, Any] = {"resources": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return self.create_success_response(result, context)

    def build_definition(self, name: str, entry: ComponentEntry) -> dict[str, Any]:
        """Build ``{uri, name, description, mimeType}`` with metadata flattened in."""
        try:
            resource = as_resource(entry.handler, name)
            definition = ResourceDefinition(
                uri=self._resolve_uri(name, resource),
                name=name,
                description=resource.get_description(),
                mime_type=resource.get_mime_type(),
            ).model_dump(by_alias=True)
            metadata = resource.get_metadata() or {}
            definition.update(metadata)
        except Exception as e:
            self.log_warning("Failed to build resource definition", resource=name, error=str(e))
            definition = ResourceDefinition(
                uri=f"resource://{name}",
                name=name,
                description=f"Resource: {component_label(entry.handler)}",
                mime_type=DEFAULT_MIME_TYPE,
            ).model_dump(by_alias=True)
        return definition

    def list_templates(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        """List resources that declare a URI template; fixed-URI resources are skipped."""
        templates: list[dict[str, Any]] = []
        for name, entry in self.registry.all(ComponentType.RESOURCE).items():
            try:
                resource = as_resource(entry.handler, name)
                uri_template = resource.get_uri_template()
                if uri_template is None:
                    continue
                templates.append(
                    ResourceTemplateDefinition(
                        uri_template=uri_template,
                        name=name,
                        description=resource.get_description(),
                        mime_type=resource.get_mime_type(),
                    ).model_dump(by_alias=True)
                )
            except Exception as e:
                self.log_warning("Failed to build resource template", resource=name, error=str(e))
        page, next_cursor = self.paginate_definitions(templates, params)
        result: dict[str, Any] = {"resourceTemplates": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return self.create_success_response(result, context)

    def find_resource(self, uri: str) -> McpResource | None:
        """Return the registered resource whose resolved URI equals ``uri``."""
        for name, entry in self.registry.all(ComponentType.RESOURCE).items():
            resource = as_resource(entry.handler, name)
            try:
                candidate = self._resolve_uri(name, resource)
            except Exception as e:
                self.log_warning("Failed to resolve resource uri", resource=name, error=str(e))
                candidate = f"resource://{name}"
            if candidate == uri:
                return resource
        return None

    def read_resource(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        self.validate_required_params(params, ["uri"])
        self.validate_request(params, _READ_RULES, _READ_MESSAGES)
        uri: str = params["uri"]

        resource = self.find_resource(uri)
        if resource is None:
            self.log_warning("Resource not found", uri=uri)
            raise ProtocolException.method_not_found(
                f"Resource not found: {uri}", method="resources/read"
            )

        read_params = {key: value for key, value in params.items() if key != "uri"}
        try:
            output = resource.read(read_params)
        except ComponentNotInvocableError as e:
            self.log_error("Resource is not readable", uri=uri)
            return self.create_error_response(e.message, INTERNAL_ERROR)
        except Exception as e:
            self.log_error("Resource read failed", uri=uri, error=str(e))
            return self.create_error_response(f"Failed to read resource: {e}", INTERNAL_ERROR)

        contents = self.format_contents(output)
        self.log_info("Resource read", uri=uri, content_count=len(contents))
        return self.create_success_response({"contents": contents}, context)

    def format_contents(self, output: Any) -> list[dict[str, Any]]:
        """Normalize a read result into a list of content items.

        - ``{"contents": [...]}`` is unwrapped and each item formatted
        - a list whose items all carry ``type`` passes through unchanged
        - any other list has each item formatted on its own
        - anything else becomes a single item
        """
        if isinstance(output, dict) and isinstance(output.get("contents"), list):
            return [self.format_item(item) for item in output["contents"]]
        if isinstance(output, (list, tuple)):
            items = list(output)
            if all(isinstance(item, dict) and "type" in item for item in items):
                return items
            return [self.format_item(item) for item in items]
        return [self.format_item(output)]

    def format_item(self, item: Any) -> dict[str, Any]:
        if isinstance(item, dict) and "type" in item:
            return item
        if isinstance(item, str):
            return {"type": "text", "text": item}
        if isinstance(item, dict):
            if any(key in item for key in _PARTIAL_CONTENT_KEYS):
                formatted: dict[str, Any] = {"type": "text"}
                formatted.update({key: item[key] for key in _PARTIAL_CONTENT_KEYS if key in item})
                return formatted
            return {"type": "text", "text": encode_json(item, pretty=True)}
        if isinstance(item, (list, tuple)):
            return {"type": "text", "text": encode_json(item, pretty=True)}
        return self.format_content(item)

    def _resolve_uri(self, name: str, resource: McpResource) -> str:
        return resource.get_uri() or f"resource://{name}"
