import json
import os
import tempfile
import unittest

from pathwaylk_ai.ai_core.common.errors import GraphStoreError
from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation
from pathwaylk_ai.ai_core.repository.graph_store import GraphStore
from pathwaylk_ai.ai_core.repository import seed_data
from pathwaylk_ai.ai_core.repository.seed_data import build_seed_graph


class GraphStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = GraphStore()
        self.store.add_relation(NodeKind.DEPARTMENT, "Civil", Relation.OFFERS, NodeKind.PROGRAM, "Civil Degree")
        self.store.add_relation(NodeKind.PROGRAM, "Civil Degree", Relation.REQUIRES, NodeKind.QUALIFICATION, "A/L")
        self.store.add_relation(NodeKind.PROGRAM, "Civil Degree", Relation.LEADS_TO, NodeKind.CAREER, "Civil Engineer")

    def test_relations_create_missing_nodes(self) -> None:
        self.assertTrue(self.store.has_node(NodeKind.PROGRAM, "Civil Degree"))
        self.assertTrue(self.store.has_node(NodeKind.QUALIFICATION, "A/L"))
        self.assertEqual(self.store.node_count, 4)
        self.assertEqual(self.store.edge_count, 3)

    def test_duplicate_relation_is_ignored(self) -> None:
        self.store.add_relation(NodeKind.PROGRAM, "Civil Degree", Relation.REQUIRES, NodeKind.QUALIFICATION, "A/L")
        self.assertEqual(self.store.edge_count, 3)

    def test_same_name_different_kind_are_distinct(self) -> None:
        self.store.add_node(NodeKind.CAREER, "Civil")
        self.assertTrue(self.store.has_node(NodeKind.DEPARTMENT, "Civil"))
        self.assertTrue(self.store.has_node(NodeKind.CAREER, "Civil"))
        self.assertEqual(self.store.names_of_kind(NodeKind.CAREER), ["Civil", "Civil Engineer"])

    def test_successors_and_predecessors_filter_by_relation(self) -> None:
        self.assertEqual(
            self.store.successors(NodeKind.PROGRAM, "Civil Degree", Relation.REQUIRES),
            ["A/L"],
        )
        self.assertEqual(
            self.store.predecessors(NodeKind.QUALIFICATION, "A/L", Relation.REQUIRES, source_kind=NodeKind.PROGRAM),
            ["Civil Degree"],
        )
        self.assertEqual(self.store.successors(NodeKind.PROGRAM, "Civil Degree", Relation.OFFERS), [])

    def test_unknown_node_returns_empty(self) -> None:
        self.assertEqual(self.store.successors(NodeKind.PROGRAM, "Missing", Relation.REQUIRES), [])
        self.assertEqual(self.store.node_attributes(NodeKind.PROGRAM, "Missing"), {})

    def test_empty_node_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.store.add_node(NodeKind.PROGRAM, "")

    def test_document_round_trip_keeps_attributes(self) -> None:
        self.store.add_node(NodeKind.PROGRAM, "Civil Degree", tier="bachelor")
        restored = GraphStore.from_document(self.store.to_document())

        self.assertEqual(restored.node_count, self.store.node_count)
        self.assertEqual(restored.edge_count, self.store.edge_count)
        self.assertEqual(restored.node_attributes(NodeKind.PROGRAM, "Civil Degree")["tier"], "bachelor")

    def test_invalid_document_raises_graph_store_error(self) -> None:
        with self.assertRaises(GraphStoreError) as ctx:
            GraphStore.from_document({"nodes": [{"kind": "Planet", "name": "Mars"}]})
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.phase, "load")

    def test_from_json_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "graph.json")
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(self.store.to_document(), handle)
            loaded = GraphStore.from_json_file(path)
        self.assertEqual(loaded.names_of_kind(NodeKind.CAREER), ["Civil Engineer"])

    def test_missing_json_file_raises(self) -> None:
        with self.assertRaises(GraphStoreError):
            GraphStore.from_json_file("/nonexistent/graph.json")


class SeedGraphTests(unittest.TestCase):
    def test_seed_graph_shape(self) -> None:
        """
        시드 그래프의 기관/학과/선수 과정 구성을 확인합니다.

        @returns {None} 테스트만 수행합니다.
        """
        graph = build_seed_graph()

        self.assertEqual(graph.names_of_kind(NodeKind.INSTITUTE), sorted([seed_data.OUSL, seed_data.VTA]))
        self.assertEqual(len(graph.names_of_kind(NodeKind.DEPARTMENT)), len(seed_data.DEPARTMENT_PROGRAMS))
        self.assertTrue(graph.is_healthy())
        self.assertEqual(
            graph.successors(NodeKind.PROGRAM, seed_data.NVQ3_ICT, Relation.IS_PREREQUISITE_FOR),
            [seed_data.NVQ4_HARDWARE],
        )
        self.assertEqual(
            sorted(graph.successors(NodeKind.PROGRAM, seed_data.ADVANCED_CERTIFICATE, Relation.IS_PREREQUISITE_FOR)),
            sorted(seed_data.degree_programs()),
        )

    def test_empty_graph_is_not_healthy(self) -> None:
        self.assertFalse(GraphStore().is_healthy())


if __name__ == "__main__":
    unittest.main()
