from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Professor Profile Q&A"
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    # Comma-separated list; "*" allows any origin
    cors_allow_origins: str = "*"

    # OpenAI (rewrite + answer generation, and embeddings when backend=openai)
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_max_retries: int = 0  # no automatic retry; every call succeeds or fails the request
    rewrite_model: str = "gpt-4o-mini"
    answer_model: str = "gpt-4o"
    rewrite_temperature: float = 0.0
    answer_temperature: float = 0.2
    rewrite_max_tokens: int = 200
    answer_max_tokens: int = 1200
    llm_timeout_seconds: float = 45.0

    # Embeddings: "openai" (remote) or "local" (sentence-transformers)
    embedding_backend: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    local_embedding_model: str = "all-MiniLM-L6-v2"
    embedding_timeout_seconds: float = 15.0

    # Chroma vector index (HTTP client when chroma_host is set, else persistent dir)
    chroma_host: str | None = None
    chroma_port: int = 8000
    chroma_persist_directory: str = "./vector_db/chroma_db"
    chroma_collection: str = "tumprof"
    index_timeout_seconds: float = 15.0

    # Index metadata keys
    kind_field: str = "kind"
    summary_kind: str = "summary"
    chunk_kind: str = "chunk"
    doc_id_field: str = "docId"
    section_field: str = "chunkBlock"
    professor_field: str = "professorName"
    url_field: str = "url"

    # Pipeline tunables
    history_max_turns: int = 12
    routing_top_k: int = 3
    chunk_top_k: int = 12
    broaden_min_chunks: int = 3
    max_passages: int = 8
    snippet_max_chars: int = 200
    request_timeout_seconds: float = 120.0
    expose_rewritten_query: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra environment variables that aren't in the Settings class
        frozen=True,
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
