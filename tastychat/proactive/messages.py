"""Localized proactive messages."""

from tastychat.proactive.models import OpportunityType, ProactiveOpportunity

OT = OpportunityType

MESSAGES: dict[str, dict[OpportunityType, str]] = {
    "en": {
        OT.FAQ_FATIGUE: "Having trouble finding what you need? I can connect you with our team for personalized help.",
        OT.USER_CONFUSION: "I notice you have several questions. Would you like to speak directly with someone from our team?",
        OT.DELIVERY_ANXIETY: "Your order is on its way! Want me to check the exact status with the restaurant?",
        OT.FRUSTRATED_USER: "I understand your frustration. Let me escalate your request to a manager immediately.",
        OT.POTENTIAL_ORDER: "Ready to place your order? I can help you get started!",
        OT.INACTIVITY_CHECK: "Still there? Feel free to ask more questions!",
        OT.REPETITIVE_QUESTION: (
            "I see this is important to you. Want me to connect you with someone "
            "who can give you a more detailed answer?"
        ),
    },
    "fr": {
        OT.FAQ_FATIGUE: "Difficile de trouver ce que vous cherchez? Je peux vous mettre en contact avec notre équipe.",
        OT.USER_CONFUSION: (
            "Je remarque que vous avez plusieurs questions. Voulez-vous parler directement "
            "avec quelqu'un de notre équipe?"
        ),
        OT.DELIVERY_ANXIETY: "Votre commande est en cours de livraison! Voulez-vous que je vérifie le statut exact?",
        OT.FRUSTRATED_USER: "Je comprends votre frustration. Laissez-moi escalader immédiatement votre demande.",
        OT.POTENTIAL_ORDER: "Prêt à commander? Je peux vous aider!",
        OT.INACTIVITY_CHECK: "Toujours là? N'hésitez pas à poser d'autres questions!",
        OT.REPETITIVE_QUESTION: (
            "Je vois que c'est important pour vous. Voulez-vous que je vous mette en contact avec quelqu'un?"
        ),
    },
    "nl": {
        OT.FAQ_FATIGUE: "Moeite met vinden wat je zoekt? Ik kan je in contact brengen met ons team.",
        OT.USER_CONFUSION: "Ik merk dat je meerdere vragen hebt. Wil je direct met iemand van ons team spreken?",
        OT.DELIVERY_ANXIETY: "Je bestelling is onderweg! Wil je dat ik de exacte status controleer?",
        OT.FRUSTRATED_USER: "Ik begrijp je frustratie. Laat me je verzoek onmiddellijk doorverwijzen.",
        OT.POTENTIAL_ORDER: "Klaar om te bestellen? Ik kan helpen!",
        OT.INACTIVITY_CHECK: "Ben je er nog? Stel gerust meer vragen!",
        OT.REPETITIVE_QUESTION: "Ik zie dat dit belangrijk voor je is. Wil je dat ik je in contact breng met iemand?",
    },
}


def format_message(opportunity: ProactiveOpportunity, language: str | None = "fr") -> str:
    """Message in `language`, falling back to the opportunity's own text."""
    return MESSAGES.get(language or "fr", {}).get(opportunity.type, opportunity.message)
