import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Wire protocols to adapters and services to their collaborators.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.search_backend import SearchBackendProtocol
    from .core.protocols.session_store import SessionStoreProtocol
    from .core.services.answer_service import AnswerComposer
    from .core.services.chat_service import ChatService
    from .core.services.fetch_service import CandidateFetcher
    from .core.services.ingest_service import IngestService
    from .core.services.intent_service import IntentClassifier
    from .core.services.ranking_service import DocumentRanker
    from .core.services.relevance_service import RelevanceFilter
    from .core.services.search_service import SearchService
    from .core.services.snippet_service import SnippetBuilder
    from .core.strategies.scoring import default_strategies
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.llm.openai_client import OpenAIChatClient
    from .infrastructure.search.search_client import SearchIndexClient
    from .infrastructure.sessions.memory_store import InMemorySessionStore

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(
            settings.embedding_model, settings.embedding_batch_size
        ),
        singleton=True,
    )

    container.register(
        SearchBackendProtocol,
        lambda: SearchIndexClient(
            endpoint=settings.search_endpoint,
            api_key=settings.search_api_key,
            index_name=settings.search_index_name,
            api_version=settings.search_api_version,
            vector_field=settings.search_vector_field,
        ),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OpenAIChatClient(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
        ),
        singleton=True,
    )

    container.register(
        SessionStoreProtocol,
        lambda: InMemorySessionStore(max_turns=settings.session_max_turns),
        singleton=True,
    )

    container.register(
        IntentClassifier,
        lambda: IntentClassifier(config_path=settings.intent_config_path),
        singleton=True,
    )

    container.register(
        CandidateFetcher,
        lambda: CandidateFetcher(
            embedder=container.resolve(EmbedderProtocol),
            search_backend=container.resolve(SearchBackendProtocol),
            candidate_cap=settings.rag_candidate_cap,
            entity_cap=settings.rag_entity_cap,
            acronyms=settings.entity_acronyms,
        ),
        singleton=True,
    )

    container.register(
        DocumentRanker,
        lambda: DocumentRanker(
            strategies=default_strategies(
                penalty=settings.rag_tracker_penalty,
                boost=settings.rag_source_boost,
                policy_multiplier=settings.rag_policy_multiplier,
                pdf=settings.rag_pdf_multiplier,
                word=settings.rag_word_multiplier,
                wiki=settings.rag_wiki_multiplier,
            ),
            top_k=settings.rag_rank_top_k,
            final_n=settings.rag_rank_final_n,
            compact_max_lines=settings.rag_compact_max_lines,
            must_keep_phrases=settings.must_keep_phrases,
        ),
        singleton=True,
    )

    container.register(
        RelevanceFilter,
        lambda: RelevanceFilter(
            llm=container.resolve(LLMProtocol),
            enabled=settings.relevance_filter_enabled,
            batch_size=settings.relevance_batch_size,
            max_chars=settings.relevance_max_chars,
            concurrency=settings.relevance_concurrency,
            min_score=settings.relevance_min_score,
            retries=settings.relevance_retries,
            timeout=settings.relevance_timeout,
            has_credentials=bool(settings.llm_api_key),
        ),
        singleton=True,
    )

    container.register(
        SnippetBuilder,
        lambda: SnippetBuilder(
            max_snippets=settings.snippet_max_count,
            max_chars=settings.snippet_max_chars,
            min_chars=settings.snippet_min_chars,
            url_min_chars=settings.snippet_url_min_chars,
            per_doc_cap=settings.snippet_per_doc_cap,
            diversity=settings.snippet_diversity,
            url_window=settings.snippet_url_window,
        ),
        singleton=True,
    )

    container.register(
        AnswerComposer,
        lambda: AnswerComposer(
            llm=container.resolve(LLMProtocol),
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout,
            history_tail=settings.history_tail,
            history_clip=settings.history_clip_chars,
        ),
        singleton=True,
    )

    container.register(
        ChatService,
        lambda: ChatService(
            classifier=container.resolve(IntentClassifier),
            fetcher=container.resolve(CandidateFetcher),
            ranker=container.resolve(DocumentRanker),
            snippet_builder=container.resolve(SnippetBuilder),
            composer=container.resolve(AnswerComposer),
            session_store=container.resolve(SessionStoreProtocol),
            relevance_filter=container.resolve(RelevanceFilter),
            default_top=settings.request_top_default,
            max_top=settings.request_top_max,
        ),
        singleton=True,
    )

    container.register(
        SearchService,
        lambda: SearchService(
            embedder=container.resolve(EmbedderProtocol),
            search_backend=container.resolve(SearchBackendProtocol),
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            embedder=container.resolve(EmbedderProtocol),
            search_backend=container.resolve(SearchBackendProtocol),
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            chunk_min_chars=settings.chunk_min_chars,
            batch_size=settings.upload_batch_size,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
