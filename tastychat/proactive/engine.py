"""Behavioral detectors for unsolicited help.

All detectors read the turn history only; nothing here calls a network
service. Results are sorted by priority, then confidence.
"""

from collections import Counter
from datetime import datetime, timedelta

from tastychat.conversation.models import ConversationContext, ConversationState, utc_now
from tastychat.nlp.models import FAQ_INTENTS, IntentType
from tastychat.proactive.models import OpportunityType, ProactiveOpportunity

OT = OpportunityType

FAQ_FATIGUE_AFTER = timedelta(minutes=5)
POTENTIAL_ORDER_AFTER = timedelta(minutes=3)
INACTIVITY_MIN = timedelta(minutes=2)
INACTIVITY_MAX = timedelta(minutes=5)
LOW_DIVERSITY = 0.3
MIN_TURNS_FOR_DIVERSITY = 4
MAX_TRACKING_ATTEMPTS = 3
REFUND_FAILURES = 1
REPETITION_WINDOW = 5
REPETITION_COUNT = 3


class ProactiveHelpEngine:
    """Detects moments where offering help or escalation is worthwhile."""

    def analyze_user_behavior(
        self,
        context: ConversationContext,
        now: datetime | None = None,
    ) -> list[ProactiveOpportunity]:
        now = now or utc_now()
        found: list[ProactiveOpportunity] = []

        faq_since = self.time_in_state(context, ConversationState.FAQ_MODE, now)
        if faq_since is not None and faq_since > FAQ_FATIGUE_AFTER:
            found.append(
                ProactiveOpportunity(
                    type=OT.FAQ_FATIGUE,
                    confidence=0.8,
                    message=(
                        "Vous avez d'autres questions? Je peux vous mettre en contact "
                        "avec un agent si vous préférez."
                    ),
                    action="offer_escalation",
                    priority="normal",
                )
            )

        classified = [t.intent.intent for t in context.turns if t.intent is not None]
        if len(classified) > MIN_TURNS_FOR_DIVERSITY and self.intent_diversity(classified) < LOW_DIVERSITY:
            found.append(
                ProactiveOpportunity(
                    type=OT.USER_CONFUSION,
                    confidence=0.75,
                    message=(
                        "Je remarque que vous avez plusieurs questions. Souhaitez-vous parler "
                        "directement avec notre équipe pour un suivi personnalisé?"
                    ),
                    action="offer_escalation",
                    priority="high",
                )
            )

        if classified.count(IntentType.TRACK_ORDER) > MAX_TRACKING_ATTEMPTS:
            found.append(
                ProactiveOpportunity(
                    type=OT.DELIVERY_ANXIETY,
                    confidence=0.7,
                    message=(
                        "Votre commande est en cours de livraison. Voulez-vous que je vérifie "
                        "le statut exact avec le restaurant?"
                    ),
                    action="offer_tracking_notification",
                    priority="normal",
                )
            )

        refund_failures = context.metadata.failed_intents.get(IntentType.REFUND, 0)
        recent_negative = any(
            t.intent is not None and t.intent.sentiment.polarity == "negative"
            for t in context.turns[-3:]
        )
        if refund_failures > REFUND_FAILURES and recent_negative:
            found.append(
                ProactiveOpportunity(
                    type=OT.FRUSTRATED_USER,
                    confidence=0.85,
                    message=(
                        "Je comprends votre frustration. Laissez-moi escalader immédiatement "
                        "votre demande à un responsable qui pourra traiter votre remboursement."
                    ),
                    action="escalate_immediately",
                    priority="urgent",
                )
            )

        faq_turns = sum(1 for intent in classified if intent in FAQ_INTENTS)
        if faq_turns > 3 and now - context.metadata.started_at > POTENTIAL_ORDER_AFTER:
            found.append(
                ProactiveOpportunity(
                    type=OT.POTENTIAL_ORDER,
                    confidence=0.6,
                    message="Vous avez toutes les informations dont vous avez besoin? Prêt à passer commande?",
                    action="suggest_order",
                    priority="low",
                )
            )

        if context.turns:
            silence = now - context.turns[-1].timestamp
            if INACTIVITY_MIN < silence < INACTIVITY_MAX:
                found.append(
                    ProactiveOpportunity(
                        type=OT.INACTIVITY_CHECK,
                        confidence=0.5,
                        message="Êtes-vous toujours là? N'hésitez pas à me poser d'autres questions!",
                        action="suggest_faq",
                        priority="low",
                    )
                )

        recent = [t.intent.intent for t in context.turns[-REPETITION_WINDOW:] if t.intent is not None]
        if recent and max(Counter(recent).values()) >= REPETITION_COUNT:
            found.append(
                ProactiveOpportunity(
                    type=OT.REPETITIVE_QUESTION,
                    confidence=0.8,
                    message=(
                        "Je vois que cette question vous préoccupe. Voulez-vous que je vous mette "
                        "en contact avec quelqu'un qui puisse vous donner une réponse plus détaillée?"
                    ),
                    action="offer_escalation",
                    priority="high",
                )
            )

        return sorted(found, key=lambda o: o.rank, reverse=True)

    @staticmethod
    def time_in_state(
        context: ConversationContext,
        state: ConversationState,
        now: datetime,
    ) -> timedelta | None:
        """Time since the current run of turns in `state` began.

        None when the latest turn was not recorded in that state.
        """
        start: datetime | None = None
        for turn in reversed(context.turns):
            if turn.metadata.get("state") != state.value:
                break
            start = turn.timestamp
        return None if start is None else now - start

    @staticmethod
    def intent_diversity(intents: list[IntentType]) -> float:
        return len(set(intents)) / max(1, len(intents))
