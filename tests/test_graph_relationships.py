"""Tests for the relationship repository and the domain graph repositories."""

from datetime import datetime, timezone

import pytest

from docgraph.models.graph import ClassNode, CodeRelationship, NovelRelationship, TopicNode
from docgraph.repositories.graph.code_graph import CodeGraphRepository
from docgraph.repositories.graph.document_graph import DocumentGraphRepository
from docgraph.repositories.graph.knowledge_graph import KnowledgeGraphRepository
from docgraph.repositories.graph.novel_graph import NovelGraphRepository
from docgraph.repositories.graph.relationships import RelationshipRepository, validate_depth
from docgraph.utils.errors import InvalidInputError, NotFoundError


def _rel_record(rel_type="KNOWS", from_id="a", to_id="b", **properties):
    return {
        "id": "r1",
        "type": rel_type,
        "from_id": from_id,
        "to_id": to_id,
        "properties": {"id": "r1", "created_at": "2025-01-01T00:00:00+00:00", **properties},
    }


class TestRelationshipRepository:

    def test_validate_type(self):
        assert RelationshipRepository.validate_type(NovelRelationship.KNOWS) == "KNOWS"
        assert RelationshipRepository.validate_type("REFERENCES") == "REFERENCES"
        with pytest.raises(InvalidInputError):
            RelationshipRepository.validate_type("LOVES")

    def test_validate_depth(self):
        validate_depth(0, 10)
        with pytest.raises(InvalidInputError):
            validate_depth(3, 1)
        with pytest.raises(InvalidInputError):
            validate_depth(1, 11)

    @pytest.mark.asyncio
    async def test_create(self, graph_store):
        graph_store.queue([_rel_record(since=2020)])
        repo = RelationshipRepository(graph_store)

        rel = await repo.create("KNOWS", "a", "b", {"since": 2020}, from_label="Character", to_label="Character")

        call = graph_store.last
        assert "MATCH (a:Character {id: $from_id}) MATCH (b:Character {id: $to_id})" in call["query"]
        assert "CREATE (a)-[r:KNOWS]->(b)" in call["query"]
        assert call["params"]["properties"] == {"since": 2020}
        assert rel.id == "r1"
        assert rel.properties == {"since": 2020}
        assert rel.created_at == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_create_with_missing_endpoint(self, graph_store):
        with pytest.raises(NotFoundError):
            await RelationshipRepository(graph_store).create("KNOWS", "a", "ghost")

    @pytest.mark.asyncio
    async def test_property_validation(self, graph_store):
        repo = RelationshipRepository(graph_store)

        with pytest.raises(InvalidInputError, match="reserved"):
            await repo.create("KNOWS", "a", "b", {"id": "mine"})
        with pytest.raises(InvalidInputError, match="unsupported value"):
            await repo.create("KNOWS", "a", "b", {"nested": {"x": 1}})
        with pytest.raises(InvalidInputError):
            await repo.create("KNOWS", "a", "b", {"mixed": [1, {"x": 2}]})
        assert graph_store.calls == []

    @pytest.mark.asyncio
    async def test_merge_keeps_single_edge(self, graph_store):
        graph_store.queue([_rel_record("CONTAINS", "d1", "e1")])

        await RelationshipRepository(graph_store).merge("CONTAINS", "d1", "e1")

        query = graph_store.last["query"]
        assert "MERGE (a)-[r:CONTAINS]->(b)" in query
        assert "ON CREATE SET r.id = $rel_id" in query

    @pytest.mark.asyncio
    async def test_get_and_delete(self, graph_store):
        graph_store.queue([_rel_record()], [{"deleted": 1}], [{"deleted": 0}])
        repo = RelationshipRepository(graph_store)

        assert (await repo.get("r1")).type == "KNOWS"
        await repo.delete("r1")
        with pytest.raises(NotFoundError):
            await repo.delete("r1")
        with pytest.raises(NotFoundError):
            await repo.get("r2")

    @pytest.mark.asyncio
    async def test_outgoing_and_incoming(self, graph_store):
        graph_store.queue([_rel_record()], [])
        repo = RelationshipRepository(graph_store)

        outgoing = await repo.outgoing("a", "KNOWS")
        assert "MATCH (a {id: $node_id})-[r:KNOWS]->(b)" in graph_store.last["query"]
        incoming = await repo.incoming("a")
        assert "MATCH (a)-[r]->(b {id: $node_id})" in graph_store.last["query"]

        assert [r.to_id for r in outgoing] == ["b"]
        assert incoming == []

    @pytest.mark.asyncio
    async def test_delete_between(self, graph_store):
        graph_store.queue([{"deleted": 2}])

        assert await RelationshipRepository(graph_store).delete_between("a", "b") == 2

    @pytest.mark.asyncio
    async def test_traverse_builds_variable_length_pattern(self, graph_store):
        graph_store.queue([
            {"node": {"id": "k2", "file_id": "f1", "name": "Base"}, "labels": ["Class"]},
            {"node": {"id": "x"}, "labels": ["Unmapped"]},
        ])

        nodes = await RelationshipRepository(graph_store).get_dependencies("k1")

        assert "-[:INHERITS|IMPLEMENTS|DEPENDS_ON|IMPORTS*1..3]->(node)" in graph_store.last["query"]
        assert len(nodes) == 1
        assert isinstance(nodes[0], ClassNode)

    @pytest.mark.asyncio
    async def test_related_is_undirected(self, graph_store):
        await RelationshipRepository(graph_store).get_related("d1", depth=4)

        assert "-[:REFERENCES|RELATED_TO*1..4]-(node)" in graph_store.last["query"]

    @pytest.mark.asyncio
    async def test_traverse_rejects_bad_arguments(self, graph_store):
        repo = RelationshipRepository(graph_store)

        with pytest.raises(InvalidInputError):
            await repo.traverse("a", [], 1, 2)
        with pytest.raises(InvalidInputError):
            await repo.traverse("a", ["KNOWS"], 1, 2, direction="sideways")
        with pytest.raises(InvalidInputError):
            await repo.traverse("a", ["KNOWS"], 0, 20)


class TestDocumentGraphRepository:

    @pytest.mark.asyncio
    async def test_link_entity_merges_contains(self, graph_store):
        graph_store.queue([_rel_record("CONTAINS", "d1", "d1:1")])

        await DocumentGraphRepository(graph_store).link_entity("d1", "d1:1")

        query = graph_store.last["query"]
        assert "(a:Document {id: $from_id})" in query
        assert "(b:Entity {id: $to_id})" in query

    @pytest.mark.asyncio
    async def test_find_similar(self, graph_store):
        graph_store.queue([{"other": {"id": "d2", "doc_name": "Other", "file_path": "/data/other.md"}, "score": 0.8}])

        results = await DocumentGraphRepository(graph_store).find_similar("d1")

        assert [(doc.id, score) for doc, score in results] == [("d2", 0.8)]

    @pytest.mark.asyncio
    async def test_find_entities_by_type_uses_filter(self, graph_store):
        await DocumentGraphRepository(graph_store).find_entities_by_type("person")

        assert graph_store.last["params"]["f0"] == "person"


class TestNovelGraphRepository:

    @pytest.mark.asyncio
    async def test_relate_characters_defaults_to_knows(self, graph_store):
        graph_store.queue([_rel_record()])

        await NovelGraphRepository(graph_store).relate_characters("a", "b")

        assert "CREATE (a)-[r:KNOWS]->(b)" in graph_store.last["query"]

    @pytest.mark.asyncio
    async def test_enemy_relationship(self, graph_store):
        graph_store.queue([_rel_record("ENEMY_OF")])

        rel = await NovelGraphRepository(graph_store).relate_characters(
            "a", "b", NovelRelationship.ENEMY_OF, {"since": "the war"}
        )

        assert rel.type == "ENEMY_OF"

    @pytest.mark.asyncio
    async def test_list_characters_filters_by_novel(self, graph_store):
        await NovelGraphRepository(graph_store).list_characters("n1")

        assert graph_store.last["params"]["f0"] == "n1"
        assert "MATCH (n:Character) WHERE n.novel_id = $f0" in graph_store.last["query"]


class TestCodeGraphRepository:

    @pytest.mark.asyncio
    async def test_inheritance_edge(self, graph_store):
        graph_store.queue([_rel_record("INHERITS", "k1", "k0")])

        rel = await CodeGraphRepository(graph_store).create_inheritance("k1", "k0")

        assert rel.type == CodeRelationship.INHERITS.value
        assert "(a:Class {id: $from_id})" in graph_store.last["query"]

    @pytest.mark.asyncio
    async def test_class_dependencies(self, graph_store):
        graph_store.queue([{"node": {"id": "k0", "file_id": "f1", "name": "Base"}, "labels": ["Class"]}])

        classes = await CodeGraphRepository(graph_store).get_class_dependencies("k1")

        assert [c.name for c in classes] == ["Base"]
        assert "(start:Class {id: $start_id})-[:INHERITS|IMPLEMENTS*1..3]->(node:Class)" in graph_store.last["query"]


class TestKnowledgeGraphRepository:

    @pytest.mark.asyncio
    async def test_topic_hierarchy_includes_root(self, graph_store):
        graph_store.queue([
            {"node": {"id": "t1", "name": "Root"}, "labels": ["Topic"]},
            {"node": {"id": "t2", "name": "Child", "level": 1}, "labels": ["Topic"]},
        ])

        topics = await KnowledgeGraphRepository(graph_store).get_topic_hierarchy("t1")

        assert "[:CONTAINS*0..5]" in graph_store.last["query"]
        assert all(isinstance(t, TopicNode) for t in topics)
        assert [t.id for t in topics] == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_related_documents_exclude_start(self, graph_store):
        graph_store.queue([
            {"node": {"id": "k1", "title": "Self"}, "labels": ["KnowledgeDocument"]},
            {"node": {"id": "k2", "title": "Other"}, "labels": ["KnowledgeDocument"]},
        ])

        documents = await KnowledgeGraphRepository(graph_store).get_related_documents("k1")

        assert [d.id for d in documents] == ["k2"]

    @pytest.mark.asyncio
    async def test_search_documents(self, graph_store):
        graph_store.queue([{"d": {"id": "k1", "title": "Graph Theory", "tags": ["math"]}}])

        documents = await KnowledgeGraphRepository(graph_store).search_documents("graph")

        assert documents[0].tags == ["math"]
        assert graph_store.last["params"] == {"keyword": "graph", "limit": 20}
