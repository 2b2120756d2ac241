from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import networkx as nx

from pathwaylk_ai.ai_core.common.errors import GraphStoreError
from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation

logger = logging.getLogger(__name__)


class GraphStore:
    """교육 경로 속성 그래프 저장소 (networkx MultiDiGraph)."""

    def __init__(self, graph: Optional[nx.MultiDiGraph] = None) -> None:
        """
        @param graph 미리 구성된 그래프. None이면 빈 그래프.
        @returns None
        """
        self._graph = graph if graph is not None else nx.MultiDiGraph()

    @staticmethod
    def node_id(kind: NodeKind, name: str) -> str:
        """
        @param kind 노드 종류.
        @param name 노드 이름 (커리어는 직함).
        @returns 그래프 내부 노드 ID.
        """
        return f"{NodeKind(kind).value}:{name}"

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def add_node(self, kind: NodeKind, name: str, **attributes: Any) -> str:
        """
        @param kind 노드 종류.
        @param name 노드 이름.
        @param attributes 부가 속성 (예: tier).
        @returns 추가된 노드 ID.
        """
        if not name:
            raise ValueError("node name must not be empty")
        node_id = self.node_id(kind, name)
        self._graph.add_node(node_id, kind=NodeKind(kind), name=name, **attributes)
        return node_id

    def add_relation(
        self,
        source_kind: NodeKind,
        source_name: str,
        relation: Relation,
        target_kind: NodeKind,
        target_name: str,
    ) -> None:
        """
        두 노드 사이에 방향 관계를 추가합니다. 없는 노드는 함께 생성합니다.

        @param source_kind 출발 노드 종류.
        @param source_name 출발 노드 이름.
        @param relation 관계 종류.
        @param target_kind 도착 노드 종류.
        @param target_name 도착 노드 이름.
        @returns None
        """
        source = self.node_id(source_kind, source_name)
        target = self.node_id(target_kind, target_name)
        if source not in self._graph:
            self.add_node(source_kind, source_name)
        if target not in self._graph:
            self.add_node(target_kind, target_name)
        relation = Relation(relation)
        # 같은 관계의 중복 간선은 무시
        existing = self._graph.get_edge_data(source, target) or {}
        if any(data.get("relation") == relation for data in existing.values()):
            return
        self._graph.add_edge(source, target, key=relation.value, relation=relation)

    def has_node(self, kind: NodeKind, name: str) -> bool:
        with self._guard("has_node"):
            return self.node_id(kind, name) in self._graph

    def node_attributes(self, kind: NodeKind, name: str) -> Dict[str, Any]:
        """
        @param kind 노드 종류.
        @param name 노드 이름.
        @returns 노드 속성 사본. 없는 노드면 빈 dict.
        """
        with self._guard("node_attributes"):
            node_id = self.node_id(kind, name)
            if node_id not in self._graph:
                return {}
            return dict(self._graph.nodes[node_id])

    def names_of_kind(self, kind: NodeKind) -> List[str]:
        """
        @param kind 노드 종류.
        @returns 해당 종류 노드 이름 목록 (이름순).
        """
        kind = NodeKind(kind)
        with self._guard("names_of_kind"):
            return sorted(
                data["name"] for _, data in self._graph.nodes(data=True) if data.get("kind") == kind
            )

    def successors(
        self,
        kind: NodeKind,
        name: str,
        relation: Relation,
        target_kind: Optional[NodeKind] = None,
    ) -> List[str]:
        """
        @param kind 기준 노드 종류.
        @param name 기준 노드 이름.
        @param relation 따라갈 관계.
        @param target_kind 도착 노드 종류 필터.
        @returns 도착 노드 이름 목록 (이름순, 중복 제거).
        """
        relation = Relation(relation)
        with self._guard("successors"):
            node_id = self.node_id(kind, name)
            if node_id not in self._graph:
                return []
            names = {
                self._graph.nodes[target]["name"]
                for _, target, data in self._graph.out_edges(node_id, data=True)
                if data.get("relation") == relation
                and (target_kind is None or self._graph.nodes[target].get("kind") == target_kind)
            }
            return sorted(names)

    def predecessors(
        self,
        kind: NodeKind,
        name: str,
        relation: Relation,
        source_kind: Optional[NodeKind] = None,
    ) -> List[str]:
        """
        @param kind 기준 노드 종류.
        @param name 기준 노드 이름.
        @param relation 거슬러 올라갈 관계.
        @param source_kind 출발 노드 종류 필터.
        @returns 출발 노드 이름 목록 (이름순, 중복 제거).
        """
        relation = Relation(relation)
        with self._guard("predecessors"):
            node_id = self.node_id(kind, name)
            if node_id not in self._graph:
                return []
            names = {
                self._graph.nodes[source]["name"]
                for source, _, data in self._graph.in_edges(node_id, data=True)
                if data.get("relation") == relation
                and (source_kind is None or self._graph.nodes[source].get("kind") == source_kind)
            }
            return sorted(names)

    def is_healthy(self) -> bool:
        """
        @returns 그래프가 조회 가능하고 프로그램 노드가 하나 이상이면 True.
        """
        try:
            return bool(self.names_of_kind(NodeKind.PROGRAM))
        except GraphStoreError:
            logger.warning("그래프 헬스 체크 실패", exc_info=True)
            return False

    # -------------------------------------------------------------------------
    # 직렬화
    # -------------------------------------------------------------------------
    def to_document(self) -> Dict[str, Any]:
        """
        @returns {"nodes": [...], "edges": [...]} 형태의 JSON 호환 문서.
        """
        nodes = []
        for _, data in self._graph.nodes(data=True):
            item = {key: value for key, value in data.items() if key not in ("kind", "name")}
            item.update({"kind": data["kind"].value, "name": data["name"]})
            nodes.append(item)
        edges = [
            {
                "source_kind": self._graph.nodes[source]["kind"].value,
                "source": self._graph.nodes[source]["name"],
                "relation": data["relation"].value,
                "target_kind": self._graph.nodes[target]["kind"].value,
                "target": self._graph.nodes[target]["name"],
            }
            for source, target, data in self._graph.edges(data=True)
        ]
        return {"nodes": nodes, "edges": edges}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "GraphStore":
        """
        @param document to_document()와 같은 형태의 문서.
        @returns 문서로 구성된 GraphStore.
        """
        store = cls()
        try:
            for node in document.get("nodes", []):
                attributes = {key: value for key, value in node.items() if key not in ("kind", "name")}
                store.add_node(NodeKind(node["kind"]), node["name"], **attributes)
            for edge in document.get("edges", []):
                store.add_relation(
                    NodeKind(edge["source_kind"]),
                    edge["source"],
                    Relation(edge["relation"]),
                    NodeKind(edge["target_kind"]),
                    edge["target"],
                )
        except (KeyError, TypeError, ValueError) as exc:
            raise GraphStoreError(f"invalid graph document: {exc}", phase="load") from exc
        logger.info(
            "교육 그래프 로드 완료",
            extra={"nodes": store.node_count, "edges": store.edge_count},
        )
        return store

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "GraphStore":
        """
        @param path 그래프 JSON 파일 경로.
        @returns 파일로 구성된 GraphStore.
        """
        try:
            with open(path, "r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise GraphStoreError(f"cannot read graph file {path}: {exc}", phase="load") from exc
        return cls.from_document(document)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except GraphStoreError:
            raise
        except (nx.NetworkXException, KeyError, TypeError, AttributeError) as exc:
            raise GraphStoreError(f"graph query failed: {exc}", phase=operation) from exc
