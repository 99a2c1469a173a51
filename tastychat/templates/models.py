"""Response template models."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from tastychat.conversation.models import ConversationContext, utc_now
from tastychat.nlp.models import EntityExtraction, IntentResult, IntentType

RenderFn = Callable[[ConversationContext, EntityExtraction], str]
ConditionFn = Callable[[ConversationContext, IntentResult], bool]


@dataclass(frozen=True)
class TemplateMetadata:
    can_escalate: bool = False
    priority: int = 5
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResponseTemplate:
    """A deterministic answer for one intent.

    `body` is either fixed text or a pure function of context and entities.
    A template with a `condition` is preferred over unconditional ones for
    the same intent when the condition holds.
    """

    id: str
    intent: IntentType
    body: str | RenderFn
    condition: ConditionFn | None = None
    suggestions: tuple[str, ...] = ()
    metadata: TemplateMetadata = field(default_factory=TemplateMetadata)

    def render(self, context: ConversationContext, entities: EntityExtraction) -> str:
        if isinstance(self.body, str):
            return self.body
        return self.body(context, entities)


@dataclass(frozen=True)
class TemplateAuditEntry:
    """Record of a runtime registration."""

    template_id: str
    intent: IntentType
    owner: str
    registered_at: datetime = field(default_factory=utc_now)


class TemplateRegistrationError(Exception):
    """Runtime template registration was refused."""
