"""Fixed replies for states where automation steps back."""

from tastychat.conversation.models import ConversationState

S = ConversationState

TICKET_INTAKE = """Je vais vous aider à ouvrir un ticket de support. Pour que notre équipe puisse vous aider rapidement:

**Informations nécessaires:**
1. Votre adresse email
2. Description de votre problème

Pouvez-vous me donner ces informations?"""

TICKET_CREATED = """Votre ticket {ticket_id} a bien été créé. Notre équipe de support vous répondra par email dans les plus brefs délais.

Y a-t-il autre chose que je devrais transmettre à l'équipe?"""

ESCALATION_PENDING = """Je transmets votre demande à notre équipe de support. Un agent prendra en charge votre dossier dans les plus brefs délais.

**En attendant:**
• Vous recevrez un email de confirmation
• Un agent vous répondra sous 2-4 heures (en heures d'ouverture)
• Vous pouvez ajouter des détails supplémentaires ci-dessous

Y a-t-il autre chose que je devrais transmettre à l'équipe?"""

WAITING_FOR_AGENT = """✅ Vous êtes maintenant en contact avec notre équipe de support. Un agent vous répondra dès que possible.

**Temps d'attente estimé:** 2-4 heures

Vous recevrez une notification par email dès qu'un agent prendra en charge votre demande. Merci de votre patience!"""

AGENT_CONVERSATION = (
    "Votre conversation est maintenant gérée par un agent humain. "
    "Toutes vos questions recevront une réponse personnalisée."
)

HANDOFF_IN_PROGRESS = "Je vous mets en relation avec un agent. Merci de patienter quelques instants."

TICKET_TIMEOUT = (
    "Nous sommes désolés pour l'attente. Votre demande est restée sans réponse trop longtemps, "
    "je la transmets en priorité à un responsable."
)

CLOSED = (
    "Cette conversation a été clôturée. Si vous avez besoin d'aide, "
    "n'hésitez pas à démarrer une nouvelle conversation!"
)

_BY_STATE: dict[ConversationState, str] = {
    S.ESCALATION_PENDING: ESCALATION_PENDING,
    S.WAITING_FOR_AGENT: WAITING_FOR_AGENT,
    S.AGENT_CONVERSATION: AGENT_CONVERSATION,
    S.AGENT_HANDOFF_IN_PROGRESS: HANDOFF_IN_PROGRESS,
    S.CLOSED: CLOSED,
}

STATE_MESSAGE_STATES: frozenset[ConversationState] = frozenset({
    S.SUPPORT_TICKET_MODE,
    S.WAITING_FOR_AGENT,
    S.AGENT_CONVERSATION,
    S.AGENT_HANDOFF_IN_PROGRESS,
    S.CLOSED,
})


def state_message(state: ConversationState, ticket_id: str | None = None) -> str | None:
    """Fixed reply for `state`, or None when the state gets a generated reply."""
    if state == S.SUPPORT_TICKET_MODE:
        return TICKET_CREATED.format(ticket_id=ticket_id) if ticket_id else TICKET_INTAKE
    return _BY_STATE.get(state)
