"""Source code graph: files, classes, functions and packages."""

from typing import List, Optional

from docgraph.db.graph import GraphStore
from docgraph.models.graph import (
    ClassNode,
    CodeFileNode,
    CodeRelationship,
    FunctionNode,
    PackageNode,
    Relationship,
)
from docgraph.repositories.graph.nodes import NodeRepository
from docgraph.repositories.graph.relationships import RelationshipRepository


class CodeGraphRepository:

    def __init__(self, store: GraphStore, relationships: Optional[RelationshipRepository] = None):
        self.store = store
        self.files = NodeRepository(store, CodeFileNode)
        self.classes = NodeRepository(store, ClassNode)
        self.functions = NodeRepository(store, FunctionNode)
        self.packages = NodeRepository(store, PackageNode)
        self.relationships = relationships or RelationshipRepository(store)

    async def list_files_by_project(self, project_id: str, limit: int = 100, offset: int = 0) -> List[CodeFileNode]:
        return await self.files.list(limit=limit, offset=offset, project_id=project_id)

    async def create_inheritance(self, child_id: str, parent_id: str) -> Relationship:
        return await self.relationships.create(
            CodeRelationship.INHERITS, child_id, parent_id,
            from_label=ClassNode.LABEL, to_label=ClassNode.LABEL,
        )

    async def create_implementation(self, class_id: str, interface_id: str) -> Relationship:
        return await self.relationships.create(
            CodeRelationship.IMPLEMENTS, class_id, interface_id,
            from_label=ClassNode.LABEL, to_label=ClassNode.LABEL,
        )

    async def create_function_call(self, caller_id: str, callee_id: str) -> Relationship:
        return await self.relationships.create(
            CodeRelationship.CALLS, caller_id, callee_id,
            from_label=FunctionNode.LABEL, to_label=FunctionNode.LABEL,
        )

    async def create_package_dependency(self, package_id: str, dependency_id: str) -> Relationship:
        return await self.relationships.create(
            CodeRelationship.DEPENDS_ON, package_id, dependency_id,
            from_label=PackageNode.LABEL, to_label=PackageNode.LABEL,
        )

    async def get_class_dependencies(self, class_id: str, min_depth: int = 1, max_depth: int = 3) -> List[ClassNode]:
        """Classes reachable over INHERITS / IMPLEMENTS."""
        nodes = await self.relationships.traverse(
            class_id,
            (CodeRelationship.INHERITS, CodeRelationship.IMPLEMENTS),
            min_depth,
            max_depth,
            direction="out",
            target_label=ClassNode.LABEL,
            start_label=ClassNode.LABEL,
        )
        return [node for node in nodes if isinstance(node, ClassNode)]

    async def get_callees(self, function_id: str, depth: int = 1) -> List[FunctionNode]:
        nodes = await self.relationships.traverse(
            function_id,
            (CodeRelationship.CALLS,),
            1,
            depth,
            direction="out",
            target_label=FunctionNode.LABEL,
            start_label=FunctionNode.LABEL,
        )
        return [node for node in nodes if isinstance(node, FunctionNode)]
