"""HTTP tests for the versioned API with the service container replaced by mocks."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from docgraph.main import app
from docgraph.models.chat import ChatChunk
from docgraph.models.document import Document, Entity
from docgraph.repositories.graph.relationships import RelationshipRepository
from docgraph.utils.errors import ConflictError, NotFoundError, ProcessingError, UnsupportedError, UpstreamError

CREATED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _document(doc_id="d1"):
    return Document(
        doc_id=doc_id,
        doc_name="handbook.md",
        doc_hash="a" * 32,
        file_path="/data/handbook.md",
        file_type=".md",
        created_at=CREATED,
    )


@pytest.fixture
def services(graph_store):
    container = SimpleNamespace(
        documents=MagicMock(),
        entities=MagicMock(),
        rag=MagicMock(),
        chat=MagicMock(),
        graph_sync=MagicMock(),
        relationships=RelationshipRepository(graph_store),
    )
    app.state.services = container
    yield container
    del app.state.services


@pytest.fixture
def client(services):
    return TestClient(app)


class TestDocumentEndpoints:

    def test_upload(self, client, services):
        services.documents.upload = AsyncMock(return_value=_document())

        response = client.post("/v1/documents", json={"file_path": "/data/handbook.md"})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["doc_id"] == "d1"
        assert body["data"]["sync_rag_state"] == 0
        services.documents.upload.assert_awaited_once_with("/data/handbook.md", None)

    def test_upload_conflict(self, client, services):
        services.documents.upload = AsyncMock(
            side_effect=ConflictError("document already exists: /data/handbook.md", {"file_path": "/data/handbook.md"})
        )

        response = client.post("/v1/documents", json={"file_path": "/data/handbook.md"})

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "ConflictError"
        assert body["details"] == {"file_path": "/data/handbook.md"}

    def test_list_paginates(self, client, services):
        services.documents.list = AsyncMock(return_value=([_document()], 41))

        response = client.get("/v1/documents", params={"page": 2, "per_page": 20})

        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert pagination == {"page": 2, "limit": 20, "total": 41, "pages": 3, "has_next": True, "has_prev": True}

    def test_get_missing(self, client, services):
        services.documents.get = AsyncMock(side_effect=NotFoundError("document not found: x", {"doc_id": "x"}))

        response = client.get("/v1/documents/x")

        assert response.status_code == 404
        assert response.json()["detail"] == "document not found: x"

    def test_delete(self, client, services):
        services.documents.delete = AsyncMock()

        response = client.delete("/v1/documents/d1")

        assert response.status_code == 200
        assert response.json()["data"] == {"doc_id": "d1", "deleted": True}

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (ProcessingError("no chunks created"), 422),
            (UpstreamError("embedding request failed"), 502),
            (UnsupportedError("PDF loader not implemented yet"), 415),
        ],
    )
    def test_process_error_mapping(self, client, services, error, status_code):
        services.documents.process = AsyncMock(side_effect=error)

        response = client.post("/v1/documents/d1/process")

        assert response.status_code == status_code
        assert response.json()["error"] == type(error).__name__

    def test_process(self, client, services):
        services.documents.process = AsyncMock(return_value=4)

        response = client.post("/v1/documents/d1/process")

        assert response.json()["data"] == {"doc_id": "d1", "chunks": 4}

    def test_add_entities(self, client, services):
        entity = Entity(id=3, doc_id="d1", entity_type="person", entity_name="Ada", meta={"k": "v"}, created_at=CREATED)
        services.entities.add_entities = AsyncMock(return_value=[entity])

        response = client.post(
            "/v1/documents/d1/entities",
            json={"entities": [{"entity_type": "person", "entity_name": "Ada", "metadata": {"k": "v"}}]},
        )

        assert response.status_code == 201
        assert response.json()["data"][0]["metadata"] == {"k": "v"}
        payload = services.entities.add_entities.await_args.args[1]
        assert payload == [{"entity_type": "person", "entity_name": "Ada", "entity_value": "", "metadata": {"k": "v"}}]

    def test_find_entities_by_name(self, client, services):
        services.entities.search_by_name = AsyncMock(return_value=[])

        response = client.get("/v1/entities", params={"name": "ada"})

        assert response.status_code == 200
        services.entities.search_by_name.assert_awaited_once_with("ada", 0, 20)

    def test_graph_sync_document(self, client, services):
        services.graph_sync.sync_document = AsyncMock(return_value={"doc_id": "d1", "entities": 2})

        response = client.post("/v1/documents/d1/graph-sync")

        assert response.json()["data"] == {"doc_id": "d1", "entities": 2}


class TestQueryEndpoint:

    def test_query(self, client, services):
        services.rag.query = AsyncMock(return_value={
            "answer": "Every 90 days.",
            "sources": [{"doc_id": "d1", "doc_name": "Handbook", "chunk_index": 0, "content": "...", "similarity": 0.9}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
        })

        response = client.post("/v1/query", json={"query": "How often?", "top_k": 3})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["answer"] == "Every 90 days."
        assert data["sources"][0]["doc_name"] == "Handbook"
        services.rag.query.assert_awaited_once_with("How often?", top_k=3)

    def test_empty_query_rejected(self, client, services):
        response = client.post("/v1/query", json={"query": ""})

        assert response.status_code == 422


class TestChatEndpoints:

    def test_create_and_list(self, client, services):
        message = ChatChunk(id=1, role="user", chunk_index=0, content="hi", meta={}, created_at=CREATED)
        services.chat.create_message = AsyncMock(return_value=message)
        services.chat.list_messages = AsyncMock(return_value=([message], 1))

        created = client.post("/v1/chat/messages", json={"role": "user", "content": "hi"})
        listed = client.get("/v1/chat/messages", params={"limit": 10, "offset": 10})

        assert created.status_code == 201
        assert created.json()["data"]["chunk_index"] == 0
        assert listed.json()["pagination"]["page"] == 2
        services.chat.list_messages.assert_awaited_once_with(limit=10, offset=10, role=None)

    def test_search_returns_similarity(self, client, services):
        message = ChatChunk(id=2, role="assistant", chunk_index=1, content="hello", meta={}, created_at=CREATED)
        services.chat.search_similar = AsyncMock(return_value=[(message, 0.88)])

        response = client.post("/v1/chat/search", json={"query": "greeting"})

        assert response.json()["data"][0]["similarity"] == 0.88

    def test_missing_message(self, client, services):
        services.chat.get_message = AsyncMock(side_effect=NotFoundError("chat message not found: 9"))

        assert client.get("/v1/chat/messages/9").status_code == 404


class TestGraphEndpoints:

    def test_create_node(self, client, services):
        store = services.relationships.store
        store.queue([{"n": {}}])

        response = client.post("/v1/graph/labels/Novel/nodes", json={"id": "n1", "title": "Ashes"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["label"] == "Novel"
        assert data["id"] == "n1"
        assert data["attributes"]["title"] == "Ashes"

    def test_unknown_label(self, client):
        response = client.get("/v1/graph/labels/Spaceship/nodes")

        assert response.status_code == 404

    def test_invalid_node_payload(self, client):
        response = client.post("/v1/graph/labels/Character/nodes", json={"id": "c1", "name": "Ayla"})

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInputError"

    def test_node_without_domain_attributes_rejected(self, client, services):
        response = client.post("/v1/graph/labels/Novel/nodes", json={"id": "n1"})

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInputError"
        assert services.relationships.store.calls == []

    def test_get_node(self, client, services):
        services.relationships.store.queue([{"n": {"id": "t1", "name": "Graphs", "level": 2}}])

        response = client.get("/v1/graph/labels/Topic/nodes/t1")

        assert response.json()["data"]["attributes"]["level"] == 2

    def test_create_relationship_with_unknown_type(self, client):
        response = client.post("/v1/graph/relationships", json={"type": "LOVES", "from_id": "a", "to_id": "b"})

        assert response.status_code == 400

    def test_delete_missing_node(self, client, services):
        services.relationships.store.queue([{"deleted": 0}])

        assert client.delete("/v1/graph/nodes/ghost").status_code == 404

    def test_sync_pending(self, client, services):
        services.graph_sync.sync_pending = AsyncMock(return_value={"synced": 1, "failed": 0, "details": []})

        response = client.post("/v1/graph/sync", params={"limit": 5})

        assert response.json()["data"]["synced"] == 1
        services.graph_sync.sync_pending.assert_awaited_once_with(5)
