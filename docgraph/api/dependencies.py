"""Service wiring and FastAPI dependency getters."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from openai import AsyncOpenAI

from docgraph.config.settings import settings
from docgraph.db.db import Database
from docgraph.db.graph import GraphStore
from docgraph.rag.chain import RAGChain
from docgraph.rag.chat_model import build_chat_model
from docgraph.rag.embedding import build_embedder
from docgraph.rag.processor import DocumentProcessor
from docgraph.rag.retriever import VectorRetriever
from docgraph.rag.splitter import TextSplitter
from docgraph.repositories.chat_repo import ChatRepository
from docgraph.repositories.chunk_repo import ChunkRepository
from docgraph.repositories.document_repo import DocumentRepository
from docgraph.repositories.entity_repo import EntityRepository
from docgraph.repositories.graph.code_graph import CodeGraphRepository
from docgraph.repositories.graph.document_graph import DocumentGraphRepository
from docgraph.repositories.graph.knowledge_graph import KnowledgeGraphRepository
from docgraph.repositories.graph.novel_graph import NovelGraphRepository
from docgraph.repositories.graph.relationships import RelationshipRepository
from docgraph.services.chat_service import ChatService
from docgraph.services.document_service import DocumentService
from docgraph.services.entity_service import EntityService
from docgraph.services.graph_sync_service import GraphSyncService
from docgraph.services.rag_service import RAGService


@dataclass
class ServiceContainer:
    documents: DocumentService
    entities: EntityService
    rag: RAGService
    chat: ChatService
    graph_sync: GraphSyncService
    relationships: RelationshipRepository
    document_graph: DocumentGraphRepository
    novel_graph: NovelGraphRepository
    code_graph: CodeGraphRepository
    knowledge_graph: KnowledgeGraphRepository


def build_services(
    database: Database,
    graph_store: GraphStore,
    openai_client: Optional[AsyncOpenAI] = None,
) -> ServiceContainer:
    """Construct every repository and service once per process."""
    document_repo = DocumentRepository(database.session_maker)
    chunk_repo = ChunkRepository(database.session_maker)
    entity_repo = EntityRepository(database.session_maker)
    chat_repo = ChatRepository(database.session_maker)

    embedder = build_embedder(openai_client)
    chat_model = build_chat_model(openai_client)
    processor = DocumentProcessor(
        chunk_repo,
        embedder,
        TextSplitter(settings.CHUNK_SIZE, settings.CHUNK_OVERLAP),
    )
    retriever = VectorRetriever(chunk_repo, embedder)

    relationships = RelationshipRepository(graph_store)
    document_graph = DocumentGraphRepository(graph_store, relationships)

    return ServiceContainer(
        documents=DocumentService(document_repo, chunk_repo, processor),
        entities=EntityService(entity_repo, document_repo),
        rag=RAGService(RAGChain(retriever, chat_model, document_repo)),
        chat=ChatService(chat_repo, embedder),
        graph_sync=GraphSyncService(document_repo, entity_repo, document_graph),
        relationships=relationships,
        document_graph=document_graph,
        novel_graph=NovelGraphRepository(graph_store, relationships),
        code_graph=CodeGraphRepository(graph_store, relationships),
        knowledge_graph=KnowledgeGraphRepository(graph_store, relationships),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_document_service(request: Request) -> DocumentService:
    return get_services(request).documents


def get_entity_service(request: Request) -> EntityService:
    return get_services(request).entities


def get_rag_service(request: Request) -> RAGService:
    return get_services(request).rag


def get_chat_service(request: Request) -> ChatService:
    return get_services(request).chat


def get_graph_sync_service(request: Request) -> GraphSyncService:
    return get_services(request).graph_sync


def get_relationship_repository(request: Request) -> RelationshipRepository:
    return get_services(request).relationships
