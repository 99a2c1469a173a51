"""Wire a ChatService from settings."""

from tastychat.chat.engine import ChatEngine
from tastychat.chat.service import ChatService
from tastychat.config.settings import Settings
from tastychat.conversation.store import SessionStore
from tastychat.conversation.stores import InMemorySessionStore
from tastychat.conversation.window import ContextWindowManager
from tastychat.generation import ResponseGenerator
from tastychat.guardrails import GuardrailsEngine, InputValidator, OutputFilter
from tastychat.knowledge import InMemoryVectorStore, KnowledgeRetriever
from tastychat.nlp import IntentClassifier
from tastychat.providers.embedding import EmbeddingProvider, create_embedding_provider
from tastychat.providers.llm import LLMExecutor, create_executor_from_config
from tastychat.support import (
    AgentQueue,
    HandoffCoordinator,
    InMemoryAgentQueue,
    InMemoryOrderRepository,
    InMemoryTicketRepository,
    LoggingNotifier,
    NotificationDispatcher,
    Notifier,
    OrderRepository,
    TicketRepository,
    WebhookNotifier,
)
from tastychat.templates import create_default_registry
from tastychat.tools import ToolOrchestrator, ToolRegistry
from tastychat.tools.builtin import register_builtin_tools
from tastychat.utils.rate_limit import SlidingWindowRateLimiter


def create_dispatcher(settings: Settings) -> NotificationDispatcher:
    notifiers: list[Notifier] = [LoggingNotifier()]
    if settings.support.webhook_url:
        notifiers.append(
            WebhookNotifier(settings.support.webhook_url, secret=settings.support.webhook_secret)
        )
    return NotificationDispatcher(notifiers)


def create_chat_service(
    settings: Settings,
    *,
    executor: LLMExecutor | None = None,
    embedding_provider: EmbeddingProvider | None = None,
    tickets: TicketRepository | None = None,
    orders: OrderRepository | None = None,
    agent_queue: AgentQueue | None = None,
    dispatcher: NotificationDispatcher | None = None,
    store: SessionStore | None = None,
) -> ChatService:
    """Build the engine and its collaborators. Explicit arguments win over settings."""
    executor = executor or create_executor_from_config(settings.providers.llm, step_name="chat")
    embeddings = embedding_provider or create_embedding_provider(settings.providers.embedding)
    tickets = tickets or InMemoryTicketRepository()
    orders = orders or InMemoryOrderRepository()
    agent_queue = agent_queue or InMemoryAgentQueue()
    dispatcher = dispatcher or create_dispatcher(settings)

    # One limiter instance holds both the LLM budget and per-session message counts
    limiter = SlidingWindowRateLimiter(window_seconds=3600)
    window = ContextWindowManager(settings.context_window)

    guardrails = GuardrailsEngine(
        InputValidator(
            rate_limiter=limiter,
            max_messages_per_hour=settings.guardrails.max_messages_per_hour,
        ),
        OutputFilter(overlap_threshold=settings.guardrails.overlap_threshold),
    )
    generator = ResponseGenerator(
        executor,
        window=window,
        rate_limiter=limiter,
        config=settings.generation,
        llm_config=settings.providers.llm,
    )
    orchestrator = ToolOrchestrator(
        executor,
        register_builtin_tools(ToolRegistry()),
        max_iterations=settings.tools.max_iterations,
        max_tokens=settings.tools.max_tokens,
    )
    retriever = None
    if settings.retrieval.enabled:
        retriever = KnowledgeRetriever(embeddings, InMemoryVectorStore(), settings.retrieval)

    engine = ChatEngine(
        IntentClassifier(embeddings, settings.classifier),
        window,
        guardrails,
        create_default_registry(),
        generator,
        orchestrator=orchestrator,
        retriever=retriever,
        handoff=HandoffCoordinator(tickets, dispatcher, settings.support.ticket_timeout_hours),
        agent_queue=agent_queue,
        orders=orders,
        tickets=tickets,
        config=settings.generation,
    )
    return ChatService(engine, store or InMemorySessionStore())
