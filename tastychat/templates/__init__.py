"""Deterministic response templates."""

from tastychat.templates.catalog import DEFAULT_TEMPLATES
from tastychat.templates.models import (
    ResponseTemplate,
    TemplateAuditEntry,
    TemplateMetadata,
    TemplateRegistrationError,
)
from tastychat.templates.registry import CORE_OWNER, TemplateRegistry


def create_default_registry() -> TemplateRegistry:
    """Registry holding the built-in catalog, extendable by the core owner."""
    return TemplateRegistry(DEFAULT_TEMPLATES)


__all__ = [
    "CORE_OWNER",
    "DEFAULT_TEMPLATES",
    "ResponseTemplate",
    "TemplateAuditEntry",
    "TemplateMetadata",
    "TemplateRegistrationError",
    "TemplateRegistry",
    "create_default_registry",
]
