"""Throttling for proactive messages."""

from collections.abc import Callable
from datetime import datetime, timedelta

from tastychat.config.models.engine import ProactiveConfig
from tastychat.conversation.models import utc_now
from tastychat.proactive.models import OpportunityType, ProactiveOpportunity


class ProactiveHelpTracker:
    """Remembers when proactive help was last shown in one session."""

    def __init__(
        self,
        config: ProactiveConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config or ProactiveConfig()
        self._clock = clock
        self._last_shown_at: datetime | None = None
        self._shown: set[OpportunityType] = set()

    @property
    def last_shown_at(self) -> datetime | None:
        return self._last_shown_at

    def has_shown(self, opportunity_type: OpportunityType) -> bool:
        return opportunity_type in self._shown

    def should_show(self, opportunity: ProactiveOpportunity) -> bool:
        if opportunity.confidence < self._config.min_confidence:
            return False
        if self._last_shown_at is None:
            return True
        elapsed = self._clock() - self._last_shown_at
        return elapsed >= timedelta(seconds=self._config.min_interval_seconds)

    def select(self, opportunities: list[ProactiveOpportunity]) -> ProactiveOpportunity | None:
        """First showable opportunity not already shown. Urgent ones may repeat."""
        for opportunity in opportunities:
            if self.has_shown(opportunity.type) and opportunity.priority != "urgent":
                continue
            if self.should_show(opportunity):
                return opportunity
        return None

    def record(self, opportunity_type: OpportunityType) -> None:
        self._last_shown_at = self._clock()
        self._shown.add(opportunity_type)

    def reset(self) -> None:
        self._last_shown_at = None
        self._shown.clear()
