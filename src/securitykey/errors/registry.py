"""Error registry for creating errors from templates."""

from typing import Any

from .errors import ErrorCategory, ErrorTemplate, SecurityKeyError


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Register (or replace) an error template."""
        self._templates[template.code] = template

    def create(self, code: str, context: dict[str, Any] | None = None) -> SecurityKeyError:
        """Create error instance from template + context.

        Args:
            code: Error code
            context: Context variables for template interpolation

        Returns:
            SecurityKeyError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        return SecurityKeyError(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            http_status=template.default_http_status,
            option_name=context.get("option_name"),
        )

    def _interpolate(self, template: str | None, context: dict[str, Any]) -> str | None:
        """Interpolate template with context.

        Missing variables are left as their placeholder text.
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError, ValueError):
            result = template
            for key, value in context.items():
                result = result.replace(f"{{{key}}}", str(value))
            return result

    def _load_builtin_templates(self) -> None:
        """Load built-in error templates."""
        self._templates["CONFIG_SOURCE_MISSING"] = ErrorTemplate(
            code="CONFIG_SOURCE_MISSING",
            category=ErrorCategory.CONFIGURATION,
            message_template="Configuration source is required",
            detail_template="No configuration source was passed to {component}",
            suggestion_template="Pass a ConfigurationSource built from a dict, YAML file or environment",
            default_http_status=500,
        )

        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIGURATION,
            message_template="Invalid configuration",
            detail_template="{detail}",
            suggestion_template="Check the configuration file and environment variables",
            default_http_status=500,
        )

        self._templates["OPTIONS_INVALID"] = ErrorTemplate(
            code="OPTIONS_INVALID",
            category=ErrorCategory.VALIDATION,
            message_template="Invalid value for option '{option_name}'",
            detail_template="Got {value!r}",
            suggestion_template="See SecurityKeyOptions for accepted values",
            default_http_status=500,
        )

        self._templates["UNAUTHORIZED"] = ErrorTemplate(
            code="UNAUTHORIZED",
            category=ErrorCategory.AUTHENTICATION,
            message_template="Invalid or missing security key",
            suggestion_template="Send a valid key in the '{header_name}' header",
            default_http_status=401,
        )
