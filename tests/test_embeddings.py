"""Tests for embeddings generation with mocked OpenAI API."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.embeddings import embed_query, embed_texts


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI embeddings response."""

    def _create_response(num_embeddings: int, dimension: int = 1024):
        mock_response = MagicMock()
        mock_response.data = []

        for i in range(num_embeddings):
            mock_embedding = MagicMock()
            mock_embedding.embedding = [0.1 * (i + 1)] * dimension
            mock_response.data.append(mock_embedding)

        return mock_response

    return _create_response


def test_embed_texts_requests_index_dimension(mock_openai_response):
    with patch("app.core.embeddings._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = mock_openai_response(1)
        mock_get_client.return_value = mock_client

        embeddings = embed_texts(["Hello world"])

        assert len(embeddings) == 1
        assert len(embeddings[0]) == 1024
        kwargs = mock_client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["dimensions"] == 1024
        assert kwargs["input"] == ["Hello world"]


def test_embed_texts_preserves_order(mock_openai_response):
    with patch("app.core.embeddings._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = mock_openai_response(3)
        mock_get_client.return_value = mock_client

        embeddings = embed_texts(["one", "two", "three"])

        assert [e[0] for e in embeddings] == pytest.approx([0.1, 0.2, 0.3])


def test_embed_texts_empty():
    with patch("app.core.embeddings._get_client") as mock_get_client:
        assert embed_texts([]) == []
        mock_get_client.assert_not_called()


def test_embed_texts_dimension_mismatch(mock_openai_response):
    with patch("app.core.embeddings._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = mock_openai_response(1, dimension=1536)
        mock_get_client.return_value = mock_client

        with pytest.raises(ValueError, match="Embedding dimension mismatch"):
            embed_texts(["Test"])


def test_embed_texts_api_error():
    with patch("app.core.embeddings._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.embeddings.create.side_effect = RuntimeError("API Error")
        mock_get_client.return_value = mock_client

        with pytest.raises(RuntimeError, match="API Error"):
            embed_texts(["Test"])


def test_embed_query_returns_single_vector(mock_openai_response):
    with patch("app.core.embeddings._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = mock_openai_response(1)
        mock_get_client.return_value = mock_client

        vector = embed_query("what is this about?")

        assert len(vector) == 1024
