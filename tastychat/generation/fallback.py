"""Static replies used when no template or model answer is available."""

from tastychat.nlp.models import IntentResult

COMPLAINT_FALLBACK = (
    "Je comprends votre préoccupation. Pour vous aider au mieux, je vais vous mettre "
    "en contact avec notre équipe de support. Un agent vous répondra rapidement. "
    "Pouvez-vous me donner votre email?"
)

ESCALATION_FALLBACK = (
    "Je vois que votre demande nécessite une attention particulière. Laissez-moi vous "
    "connecter avec notre équipe de support. Quel est le meilleur moyen de vous contacter?"
)

GENERIC_FALLBACK = (
    "Je ne suis pas sûr d'avoir bien compris votre question. Pourriez-vous reformuler "
    "ou me dire si vous souhaitez:\n"
    "• Commander un repas\n"
    "• Suivre votre commande\n"
    "• Signaler un problème\n"
    "• Parler à un agent"
)

ERROR_APOLOGY = (
    "Désolé, une erreur est survenue de notre côté. Je transmets votre demande à notre "
    "équipe de support, un agent vous recontactera rapidement."
)


def fallback_response(intent: IntentResult | None) -> str:
    if intent is None:
        return GENERIC_FALLBACK
    if intent.sentiment.has_complaint:
        return COMPLAINT_FALLBACK
    if intent.escalation_flag:
        return ESCALATION_FALLBACK
    return GENERIC_FALLBACK
