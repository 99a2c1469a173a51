"""Built-in French response templates for Tasty Food."""

from tastychat.conversation.models import ConversationContext
from tastychat.nlp.models import EntityExtraction, IntentResult, IntentType
from tastychat.templates.models import ResponseTemplate, TemplateMetadata

BRANCH_NAMES = ("Angleur", "Saint-Gilles", "Wandre", "Seraing", "Jemeppe-sur-Meuse")


def _platform_is(platform: str):
    def condition(_ctx: ConversationContext, intent: IntentResult) -> bool:
        return intent.entities.platform == platform

    return condition


def _track_ubereats(_ctx: ConversationContext, entities: EntityExtraction) -> str:
    order_number = entities.order_number or "[votre numéro de commande]"
    return f"""**Pour suivre votre commande Uber Eats:**

1. Ouvrez l'app Uber Eats
2. Appuyez sur **"Vos commandes"** en bas
3. Trouvez votre commande #{order_number}
4. Vous verrez le statut en temps réel avec la position du livreur

📍 **Délai habituel**: 20-30 minutes depuis notre restaurant d'Angleur

La commande semble bloquée ou en retard? Je peux escalader le problème. Pouvez-vous partager le numéro de commande?"""


def _missing_item(_ctx: ConversationContext, entities: EntityExtraction) -> str:
    return f"""Je suis vraiment désolé pour cet oubli! 😞 C'est inacceptable.

**Pour vous aider rapidement:**
1. Numéro de commande: {entities.order_number or "?"}
2. Quels articles manquent?
3. Sur quelle plateforme avez-vous commandé?

Une fois que j'ai ces infos, je peux:
• Traiter un remboursement immédiat
• Organiser une nouvelle livraison des articles manquants
• Escalader à un responsable si besoin

Partagez les détails et je m'occupe de tout de suite."""


def _hours(ctx: ConversationContext, entities: EntityExtraction) -> str:
    branch = entities.branch or ctx.metadata.current_branch
    if branch:
        return f"""**Horaires Tasty Food {branch.title()}:**

🕐 Lundi - Vendredi: 11h00 - 23h00
🕐 Samedi - Dimanche: 10h00 - 00h00

📞 Appelez le restaurant pour confirmer les horaires du jour.

Souhaitez-vous commander maintenant?"""

    branches = "\n".join(f"• {name}" for name in BRANCH_NAMES)
    return f"""**Nos horaires:**

🕐 Lun - Ven: 11h00 - 23h00
🕐 Sam - Dim: 10h00 - 00h00

*(Horaires pouvant varier selon le restaurant)*

**Nos restaurants:**
{branches}

Quel restaurant vous intéresse?"""


DEFAULT_TEMPLATES: tuple[ResponseTemplate, ...] = (
    ResponseTemplate(
        id="faq_halal_main",
        intent=IntentType.FAQ_HALAL,
        body="""Oui, **Tasty Food est 100% HALAL certifié** 🟢

Tous nos produits sont certifiés HALAL par l'AVS (Association of Verification Services), l'organisme officiel belge de certification HALAL.

**Détails:**
• Viande (bœuf, poulet, agneau): 100% HALAL certifiée
• Poisson: Frais et conforme HALAL
• Préparation: Zones dédiées pour éviter toute contamination croisée

Vous avez d'autres questions sur nos certifications?""",
        suggestions=("Voir notre menu HALAL", "Commander maintenant", "Appeler le restaurant"),
        metadata=TemplateMetadata(priority=10, tags=("faq", "dietary", "certification")),
    ),
    ResponseTemplate(
        id="faq_certifications",
        intent=IntentType.FAQ_CERTIFICATIONS,
        body="""**Nos certifications officielles:**

🟢 **HALAL**: Certifié par AVS Belgium (100% de nos viandes)
✅ **Hygiène**: Agence Fédérale pour la Sécurité de la Chaîne Alimentaire (AFSCA)
🌱 **Options végétariennes**: Disponibles sur demande

Tous nos certificats sont affichés en restaurant et disponibles sur demande. Souhaitez-vous commander ou en savoir plus?""",
        suggestions=("Commander", "Questions sur les ingrédients", "Appeler"),
        metadata=TemplateMetadata(priority=9, tags=("faq", "certification")),
    ),
    ResponseTemplate(
        id="track_order_ubereats",
        intent=IntentType.TRACK_ORDER,
        condition=_platform_is("ubereats"),
        body=_track_ubereats,
        suggestions=("J'ai le numéro", "Commande bloquée", "Demander un remboursement"),
        metadata=TemplateMetadata(can_escalate=True, priority=9, tags=("tracking", "ubereats")),
    ),
    ResponseTemplate(
        id="track_order_deliveroo",
        intent=IntentType.TRACK_ORDER,
        condition=_platform_is("deliveroo"),
        body="""**Pour suivre votre commande Deliveroo:**

1. Ouvrez l'app Deliveroo
2. Allez dans **"Commandes"**
3. Sélectionnez votre commande active
4. Suivez le livreur sur la carte en temps réel

⏱️ **Temps estimé**: 25-35 minutes

Besoin d'aide supplémentaire? Donnez-moi votre numéro de commande et je vérifie.""",
        suggestions=("Numéro de commande", "Problème de livraison", "Contact restaurant"),
        metadata=TemplateMetadata(can_escalate=True, priority=9, tags=("tracking", "deliveroo")),
    ),
    ResponseTemplate(
        id="track_order_generic",
        intent=IntentType.TRACK_ORDER,
        body="""**Pour suivre votre commande:**

Veuillez me dire sur quelle plateforme vous avez commandé:
• **Uber Eats**
• **Deliveroo**
• **Takeaway.com**
• **Site Tasty Food**

Je vous guiderai ensuite étape par étape! 📱""",
        suggestions=("Uber Eats", "Deliveroo", "Takeaway", "Site web"),
        metadata=TemplateMetadata(priority=8, tags=("tracking",)),
    ),
    ResponseTemplate(
        id="complaint_missing_item",
        intent=IntentType.MISSING_ITEM,
        body=_missing_item,
        suggestions=("Remboursement", "Nouvelle livraison", "Parler à un responsable"),
        metadata=TemplateMetadata(can_escalate=True, priority=10, tags=("complaint", "missing")),
    ),
    ResponseTemplate(
        id="complaint_wrong_order",
        intent=IntentType.WRONG_ORDER,
        body="""Oh non! Je comprends votre frustration. Recevoir la mauvaise commande, c'est vraiment décevant. 😔

**Dites-moi:**
• Qu'avez-vous reçu à la place?
• Qu'aviez-vous commandé?
• Numéro de commande (si vous l'avez)

Je vais immédiatement escalader cela à notre équipe pour:
✅ Remboursement complet
✅ Ou nouvelle livraison gratuite de la bonne commande

Votre satisfaction est notre priorité. Donnez-moi les détails.""",
        suggestions=("Remboursement", "Bonne commande gratuite", "Escalader maintenant"),
        metadata=TemplateMetadata(can_escalate=True, priority=10, tags=("complaint", "wrong_order")),
    ),
    ResponseTemplate(
        id="quality_issue",
        intent=IntentType.QUALITY_ISSUE,
        body="""Je suis sincèrement désolé que la qualité n'ait pas été à la hauteur de vos attentes. 😟 Nous prenons cela très au sérieux.

**Pouvez-vous me préciser:**
• Quel produit avait un problème?
• Qu'est-ce qui n'allait pas (froid, brûlé, goût, etc.)?
• Votre numéro de commande

Je vais transmettre cela immédiatement à notre manager pour:
• Enquête interne
• Remboursement ou bon de compensation
• S'assurer que cela ne se reproduise pas

Votre feedback nous aide à nous améliorer. Merci de nous le signaler.""",
        suggestions=("Remboursement", "Bon de compensation", "Parler au manager"),
        metadata=TemplateMetadata(can_escalate=True, priority=10, tags=("complaint", "quality")),
    ),
    ResponseTemplate(
        id="refund_request",
        intent=IntentType.REFUND,
        body="""Je comprends que vous souhaitez un remboursement. Laissez-moi vous aider.

**Informations nécessaires:**
• Numéro de commande
• Raison du remboursement (article manquant, mauvaise qualité, etc.)
• Plateforme de commande (Uber Eats, Deliveroo, etc.)

**Délai de traitement:** 3-5 jours ouvrables une fois approuvé.

Je vais escalader votre demande à notre équipe de support qui la traitera en priorité. Partagez les détails s'il vous plaît.""",
        suggestions=("Donner les infos", "Escalader maintenant", "Annuler la demande"),
        metadata=TemplateMetadata(can_escalate=True, priority=9, tags=("refund",)),
    ),
    ResponseTemplate(
        id="faq_ordering",
        intent=IntentType.FAQ_ORDERING,
        body="""**Comment commander chez Tasty Food:**

📱 **En ligne:**
• Uber Eats, Deliveroo et Takeaway.com: recherchez "Tasty Food"
• Notre site: tastyfood.be

📞 **Par téléphone:**
Appelez le restaurant le plus proche (numéros sur tastyfood.be)

🏪 **Sur place:**
Venez directement au restaurant (carte & espèces acceptées)

**Délai de livraison:** 30-40 minutes en moyenne.

Prêt à commander?""",
        suggestions=("Commander sur Uber Eats", "Commander sur Deliveroo", "Voir les restaurants"),
        metadata=TemplateMetadata(priority=8, tags=("faq", "ordering")),
    ),
    ResponseTemplate(
        id="faq_hours",
        intent=IntentType.FAQ_HOURS,
        body=_hours,
        suggestions=("Angleur", "Saint-Gilles", "Wandre", "Commander maintenant"),
        metadata=TemplateMetadata(priority=7, tags=("faq", "hours")),
    ),
    ResponseTemplate(
        id="faq_menu",
        intent=IntentType.FAQ_MENU,
        body="""**Notre menu Tasty Food:**

🍔 **Burgers "Smash"**
• Technique spéciale: pressés sur le grill pour une croûte croustillante
• 100% HALAL certifié
• Recettes signatures

🍟 **Accompagnements**
• Frites croustillantes maison
• Chicken wings
• Sauces variées

🥤 **Boissons**
• Milkshakes
• Sodas
• Jus frais

🌱 **Options végétariennes** disponibles!

Consultez le menu complet sur Uber Eats ou Deliveroo. Prêt à commander?""",
        suggestions=("Voir menu complet", "Commander", "Questions ingrédients"),
        metadata=TemplateMetadata(priority=8, tags=("faq", "menu")),
    ),
    ResponseTemplate(
        id="greeting_main",
        intent=IntentType.GREETING,
        body="""Bonjour! 👋 Bienvenue chez Tasty Food!

Je suis Tasty, votre assistant virtuel. Comment puis-je vous aider aujourd'hui?

**Je peux vous aider avec:**
• Informations sur nos burgers HALAL 🍔
• Suivi de commande 📦
• Horaires et adresses 📍
• Questions sur le menu 📋
• Support et réclamations 💬""",
        suggestions=("Commander", "Suivre ma commande", "Infos HALAL", "Autre question"),
        metadata=TemplateMetadata(priority=5, tags=("greeting",)),
    ),
    ResponseTemplate(
        id="escalation_request",
        intent=IntentType.SPEAK_AGENT,
        body="""Bien sûr! Je comprends que vous préférez parler à quelqu'un.

Je vais vous mettre en contact avec notre équipe de support. Un agent humain répondra à votre demande dans les **2 heures** (pendant les heures d'ouverture).

**En attendant:**
Pouvez-vous me donner quelques détails sur votre problème pour que l'agent soit mieux préparé?
• Votre email
• Nature du problème
• Numéro de commande (si applicable)""",
        suggestions=("Créer un ticket", "Donner les détails", "Attendre l'agent"),
        metadata=TemplateMetadata(can_escalate=True, priority=9, tags=("escalation",)),
    ),
    ResponseTemplate(
        id="out_of_scope",
        intent=IntentType.OUT_OF_SCOPE,
        body="""Je suis spécialisé dans l'aide aux clients de Tasty Food (commandes, menu, support).

Votre question semble sortir de mon domaine d'expertise. 🤔

**Je peux vous aider avec:**
• Commandes et livraisons
• Menu et certifications HALAL
• Réclamations et support
• Informations sur nos restaurants

Voulez-vous me poser une autre question ou parler à un agent?""",
        suggestions=("Poser une autre question", "Parler à un agent", "Commander"),
        metadata=TemplateMetadata(can_escalate=True, priority=3, tags=("out_of_scope",)),
    ),
)
