"""Configuration management for the BRAINTOK backend."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")
    SUPABASE_JWT_SECRET: str | None = Field(
        default=None, description="Shared secret for verifying Supabase-issued JWTs locally"
    )
    SUPABASE_JWT_AUDIENCE: str = Field(
        default="authenticated", description="Expected JWT audience (empty to skip the check)"
    )

    # OpenAI configuration (required)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Environment
    BRAINTOK_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # S3 configuration
    AWS_REGION: str = Field(default="us-east-1", description="AWS region of the document bucket")
    AWS_ACCESS_KEY_ID: str | None = Field(default=None, description="AWS access key id")
    AWS_SECRET_ACCESS_KEY: str | None = Field(default=None, description="AWS secret access key")
    S3_BUCKET_NAME: str = Field(default="braintok-documents", description="Document bucket")
    PRESIGNED_PUT_EXPIRES: int = Field(default=3600, description="Upload URL lifetime in seconds")
    PRESIGNED_GET_EXPIRES: int = Field(default=300, description="Access URL lifetime in seconds")

    # Pinecone configuration
    PINECONE_API_KEY: str | None = Field(default=None, description="Pinecone API key")
    PINECONE_INDEX_NAME: str = Field(default="braintok", description="Pinecone index name")
    PINECONE_CLOUD: str = Field(default="aws", description="Serverless cloud for index creation")
    PINECONE_REGION: str = Field(default="us-east-1", description="Serverless region")
    PINECONE_METRIC: str = Field(default="cosine", description="Index similarity metric")
    PINECONE_READY_ATTEMPTS: int = Field(default=10, description="Polls before giving up on index")
    PINECONE_READY_INTERVAL: float = Field(default=2.0, description="Seconds between index polls")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=1024, description="Embedding vector dimension")
    EMBED_BATCH_SIZE: int = Field(default=100, description="Chunks embedded and upserted per batch")

    # Chunking configuration
    CHUNK_SIZE: int = Field(default=1000, description="Characters per chunk")
    CHUNK_OVERLAP: int = Field(default=200, description="Characters shared by adjacent chunks")

    # RAG chat configuration
    RAG_TOP_K: int = Field(default=5, description="Chunks retrieved per question")
    CHAT_MODEL: str = Field(default="gpt-3.5-turbo", description="Model for document chat")
    CHAT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for chat")
    CHAT_MEMORY_WINDOW: int = Field(
        default=10, description="Question/answer exchanges kept in conversation memory"
    )

    # PDF limits
    MAX_PDF_BYTES: int = Field(default=10 * 1024 * 1024, description="Max PDF size in bytes")
    MAX_PDF_PAGES: int = Field(default=300, description="Max PDF pages extracted")

    # HTTP
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed browser origins",
    )
    FRONTEND_URL: str | None = Field(default=None, description="Deployed frontend origin")

    def allowed_origins(self) -> list[str]:
        """CORS origins including the deployed frontend, if configured."""
        origins = list(self.CORS_ORIGINS)
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
