"""Immutable template registry with one audited extension point."""

from collections.abc import Iterable

from tastychat.conversation.models import ConversationContext
from tastychat.nlp.models import EntityExtraction, IntentResult, IntentType
from tastychat.observability.logging import get_logger
from tastychat.templates.models import (
    ResponseTemplate,
    TemplateAuditEntry,
    TemplateRegistrationError,
)

logger = get_logger(__name__)

CORE_OWNER = "core"


class TemplateRegistry:
    """Lookup over a fixed tuple of templates.

    The table is assembled at startup. `add_template` is the only way to
    extend it: the caller must be a known owner, ids may not collide, and
    every registration is kept in `audit_log`.
    """

    def __init__(
        self,
        templates: Iterable[ResponseTemplate],
        *,
        owners: Iterable[str] = (CORE_OWNER,),
    ) -> None:
        self._templates: tuple[ResponseTemplate, ...] = tuple(templates)
        self._owners = frozenset(owners)
        self._audit: list[TemplateAuditEntry] = []

        ids = [t.id for t in self._templates]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise TemplateRegistrationError(f"Duplicate template ids: {sorted(duplicates)}")

    @property
    def templates(self) -> tuple[ResponseTemplate, ...]:
        return self._templates

    @property
    def audit_log(self) -> tuple[TemplateAuditEntry, ...]:
        return tuple(self._audit)

    def get(self, template_id: str) -> ResponseTemplate | None:
        return next((t for t in self._templates if t.id == template_id), None)

    def for_intent(self, intent: IntentType) -> list[ResponseTemplate]:
        return [t for t in self._templates if t.intent == intent]

    def find(
        self,
        intent: IntentType,
        context: ConversationContext,
        intent_result: IntentResult,
    ) -> ResponseTemplate | None:
        """Best template for an intent: a matching conditional one, else the first plain one."""
        matching = self.for_intent(intent)
        for template in matching:
            if template.condition is not None and template.condition(context, intent_result):
                return template
        return next((t for t in matching if t.condition is None), None)

    def render(
        self,
        template: ResponseTemplate,
        context: ConversationContext,
        entities: EntityExtraction,
    ) -> str:
        return template.render(context, entities)

    def add_template(self, template: ResponseTemplate, *, owner: str) -> None:
        if owner not in self._owners:
            logger.warning("template_registration_refused", template_id=template.id, owner=owner)
            raise TemplateRegistrationError(f"Owner '{owner}' may not register templates")
        if self.get(template.id) is not None:
            raise TemplateRegistrationError(f"Template '{template.id}' already registered")

        self._templates = (*self._templates, template)
        self._audit.append(
            TemplateAuditEntry(template_id=template.id, intent=template.intent, owner=owner)
        )
        logger.info(
            "template_registered",
            template_id=template.id,
            intent=template.intent.value,
            owner=owner,
        )
