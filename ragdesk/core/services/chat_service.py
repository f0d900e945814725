"""Chat service - runs one question through the whole answer pipeline."""

import logging
from typing import Any, Optional

from ..exceptions import ConfigurationError, InvalidRequestError, RetrievalError
from ..models.answer import AnswerRequest, AnswerResponse, Source, error_response
from ..models.chat import ConversationTurn
from ..protocols.session_store import SessionStoreProtocol
from .answer_service import AnswerComposer
from .fetch_service import CandidateFetcher
from .intent_service import IntentClassifier
from .ranking_service import DocumentRanker
from .relevance_service import RelevanceFilter
from .snippet_service import SnippetBuilder

logger = logging.getLogger(__name__)

NO_INFO_RESPONSE = (
    "I couldn't find any relevant information in the uploaded documents "
    "to answer your question."
)


class ChatService:
    """Intent -> fetch -> rank -> (filter) -> snippets -> compose -> remember."""

    def __init__(
        self,
        classifier: IntentClassifier,
        fetcher: CandidateFetcher,
        ranker: DocumentRanker,
        snippet_builder: SnippetBuilder,
        composer: AnswerComposer,
        session_store: SessionStoreProtocol,
        relevance_filter: Optional[RelevanceFilter] = None,
        default_top: int = 5,
        max_top: int = 8,
    ):
        """Initialize chat service.

        Args:
            classifier: Intent classifier, runs before any retrieval.
            fetcher: Candidate fetcher.
            ranker: Document ranker.
            snippet_builder: Snippet builder.
            composer: Answer composer.
            session_store: Conversation history store.
            relevance_filter: Optional LLM relevance pass.
            default_top: Result cap when the request names none.
            max_top: Upper bound for the request's result cap.
        """
        self._classifier = classifier
        self._fetcher = fetcher
        self._ranker = ranker
        self._snippets = snippet_builder
        self._composer = composer
        self._sessions = session_store
        self._relevance = relevance_filter
        self._default_top = default_top
        self._max_top = max_top

    async def _remember(self, session_id: str, question: str, answer: str) -> None:
        await self._sessions.append(session_id, ConversationTurn("user", question))
        await self._sessions.append(session_id, ConversationTurn("assistant", answer))
        logger.info(f"Session {session_id}: stored turn pair")

    async def _no_info(
        self, request: AnswerRequest, search_results: int = 0
    ) -> AnswerResponse:
        await self._remember(request.session_id, request.question, NO_INFO_RESPONSE)
        return AnswerResponse(
            question=request.question,
            response=NO_INFO_RESPONSE,
            session_id=request.session_id,
            search_results=search_results,
        )

    async def answer(self, request: AnswerRequest) -> AnswerResponse:
        """Answer a validated request.

        Raises:
            ConfigurationError: A collaborator is not configured.
        """
        question = request.question
        intent = self._classifier.classify(question)

        if intent.short_circuits:
            await self._remember(request.session_id, question, intent.response)
            return AnswerResponse(
                question=question,
                response=intent.response,
                session_id=request.session_id,
                intent=intent.intent.value,
            )

        try:
            hits = await self._fetcher.fetch(question, request.top)
        except RetrievalError as e:
            logger.error(f"Retrieval failed: {e}")
            hits = []

        if not hits:
            return await self._no_info(request)

        candidates = self._ranker.rank(question, hits)
        if self._relevance is not None:
            candidates = await self._relevance.filter(question, candidates)

        snippets = self._snippets.build(question, candidates, request.top)
        if not snippets:
            logger.info(f"No usable snippets from {len(hits)} hits")
            return await self._no_info(request, search_results=len(hits))

        history = await self._sessions.get(request.session_id)
        composed = await self._composer.compose(question, snippets, history)

        sources = []
        if composed.grounded:
            sources = [Source.from_snippet(s) for s in snippets]

        await self._remember(request.session_id, question, composed.text)
        return AnswerResponse(
            question=question,
            response=composed.text,
            session_id=request.session_id,
            sources=sources,
            search_results=len(hits),
        )

    async def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Transport-facing entry point: raw payload in, response dict out."""
        try:
            request = AnswerRequest.from_dict(
                payload, default_top=self._default_top, max_top=self._max_top
            )
        except InvalidRequestError as e:
            logger.info(f"Rejected request: {e}")
            return error_response(str(e))

        try:
            response = await self.answer(request)
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            return error_response(str(e))
        except Exception as e:
            logger.exception(f"Pipeline failed for '{request.question[:50]}': {e}")
            return error_response("Failed to generate response")

        return response.to_dict()
