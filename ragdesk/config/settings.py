
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Search index (Azure AI Search compatible REST API)
    search_endpoint: str = ""
    search_api_key: str = ""
    search_index_name: str = "documents"
    search_api_version: str = "2023-11-01"
    search_vector_field: str = "contentVector"

    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 800
    llm_temperature: float = 0.2
    llm_timeout: float = 30.0

    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_batch_size: int = 10

    # Request bounds
    request_top_default: int = 5
    request_top_max: int = 8

    # Candidate fetcher
    rag_candidate_cap: int = 40
    rag_entity_cap: int = 10
    entity_acronyms: dict[str, str] = {"nor": "NOR (Platform)"}

    # Ranker
    rag_tracker_penalty: float = 0.05
    rag_source_boost: float = 5.0
    rag_policy_multiplier: float = 2.0
    rag_pdf_multiplier: float = 2.0
    rag_word_multiplier: float = 1.8
    rag_wiki_multiplier: float = 0.7
    rag_rank_top_k: int = 20
    rag_rank_final_n: int = 12
    rag_compact_max_lines: int = 8
    must_keep_phrases: list[str] = []

    # Snippet builder
    snippet_max_count: int = 8
    snippet_max_chars: int = 1000
    snippet_min_chars: int = 120
    snippet_url_min_chars: int = 40
    snippet_per_doc_cap: int = 3
    snippet_diversity: bool = True
    snippet_url_window: int = 2

    # Conversation
    session_max_turns: int = 10
    history_tail: int = 6
    history_clip_chars: int = 300

    # LLM relevance filter
    relevance_filter_enabled: bool = False
    relevance_batch_size: int = 4
    relevance_max_chars: int = 1000
    relevance_concurrency: int = 3
    relevance_min_score: float = 0.5
    relevance_retries: int = 2
    relevance_timeout: float = 25.0

    intent_config_path: str = "intent_config.json"

    # Ingestion
    chunk_size: int = 1000
    chunk_overlap: int = 200
    chunk_min_chars: int = 50
    upload_batch_size: int = 50

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
