from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation
from pathwaylk_ai.ai_core.domain.program_details import ProgramDetails
from pathwaylk_ai.ai_core.domain.program_tier import classify_tier
from pathwaylk_ai.ai_core.repository.graph_store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


class PathwayResolver:
    """자격 요건에서 선수 과정 체인으로 도달 가능한 프로그램을 찾는 서비스."""

    def __init__(self, graph: GraphStore, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """
        @param {GraphStore} graph - 교육 경로 그래프.
        @param {int} max_depth - 선수 과정 체인 최대 탐색 깊이.
        @returns {None} 서비스를 초기화합니다.
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._graph = graph
        self._max_depth = max_depth

    def resolve_pathway(self, department_filter: str, qualification: str) -> List[ProgramDetails]:
        """
        자격 요건으로 진학 가능한 프로그램을 학과 필터로 좁혀 반환합니다.

        정렬: 경로 거리 → 프로그램 단계(NVQ 3 → ... → BSc → 기타) → 이름.

        @param {str} department_filter - 학과 이름 부분 문자열 (대소문자 구분).
        @param {str} qualification - 보유 자격 이름.
        @returns {List[ProgramDetails]} 도달 가능한 프로그램 목록. 없으면 빈 리스트.
        """
        if not department_filter or not department_filter.strip():
            raise ValueError("department_filter must not be empty")
        if not qualification or not qualification.strip():
            raise ValueError("qualification must not be empty")

        direct = set(
            self._graph.predecessors(
                NodeKind.QUALIFICATION, qualification, Relation.REQUIRES, source_kind=NodeKind.PROGRAM
            )
        )
        if not direct:
            logger.info("자격 요건을 요구하는 프로그램 없음", extra={"qualification": qualification})
            return []

        chain_distances = self._chain_distances(direct)
        candidates = self._candidate_programs(department_filter)

        results: Dict[str, ProgramDetails] = {}
        for program in sorted(candidates):
            reachable = (
                self.directly_requires(program, direct)
                or self.reachable_via_chain(program, chain_distances)
                or self.bridged_from(program, qualification, direct, chain_distances)
            )
            if not reachable:
                continue
            distance = 0 if program in direct else chain_distances.get(program, 0)
            results[program] = self.describe_program(
                program, department=candidates[program], path_distance=distance
            )

        ordered = sorted(results.values(), key=lambda item: (item.path_distance, item.tier, item.name))
        logger.info(
            "경로 탐색 완료",
            extra={
                "department_filter": department_filter,
                "qualification": qualification,
                "count": len(ordered),
            },
        )
        return ordered

    # -------------------------------------------------------------------------
    # 도달 가능성 판정
    # -------------------------------------------------------------------------
    @staticmethod
    def directly_requires(program: str, direct_requirers: Set[str]) -> bool:
        """
        @param program 프로그램 이름.
        @param direct_requirers 자격을 직접 요구하는 프로그램 집합.
        @returns 프로그램이 자격을 직접 요구하면 True.
        """
        return program in direct_requirers

    @staticmethod
    def reachable_via_chain(program: str, chain_distances: Dict[str, int]) -> bool:
        """
        @param program 프로그램 이름.
        @param chain_distances 직접 요구 프로그램에서 1단계 이상 선수 체인으로 닿는 거리.
        @returns 체인으로 도달 가능하면 True.
        """
        return program in chain_distances

    def bridged_from(
        self,
        program: str,
        qualification: str,
        direct_requirers: Set[str],
        chain_distances: Dict[str, int],
    ) -> bool:
        """
        프로그램이 다른 자격을 요구하지만, 이 자격을 요구하는 브리지 프로그램에서
        0단계 이상 선수 체인으로 이어지는지 판정합니다.

        브리지에서 0단계는 direct_requirers, 1단계 이상은 chain_distances와 같은 집합이므로
        앞의 두 판정을 통과하지 못한 프로그램에는 항상 False입니다.

        @param program 프로그램 이름.
        @param qualification 보유 자격 이름.
        @param direct_requirers 브리지 후보 (자격을 직접 요구하는 프로그램).
        @param chain_distances 브리지들에서 출발한 체인 거리.
        @returns 브리지 경로가 있으면 True.
        """
        if program not in direct_requirers and program not in chain_distances:
            return False
        requirements = self._graph.successors(NodeKind.PROGRAM, program, Relation.REQUIRES)
        return any(requirement != qualification for requirement in requirements)

    def _chain_distances(self, sources: Iterable[str]) -> Dict[str, int]:
        """
        직접 요구 프로그램 집합에서 출발하는 다중 출발점 BFS.

        @param sources 출발 프로그램들.
        @returns 프로그램 → 최단 체인 길이 (1 이상, max_depth 이하).
        """
        distances: Dict[str, int] = {}
        queue = deque((source, 0) for source in sorted(sources))
        expanded: Set[str] = set()
        while queue:
            program, depth = queue.popleft()
            if program in expanded or depth >= self._max_depth:
                continue
            expanded.add(program)
            for successor in self._graph.successors(
                NodeKind.PROGRAM, program, Relation.IS_PREREQUISITE_FOR, target_kind=NodeKind.PROGRAM
            ):
                if successor not in distances:
                    distances[successor] = depth + 1
                    queue.append((successor, depth + 1))
        return distances

    def _candidate_programs(self, department_filter: str) -> Dict[str, str]:
        """
        @param department_filter 학과 이름 부분 문자열.
        @returns 후보 프로그램 → 개설 학과 (여러 학과면 이름순 첫 학과).
        """
        candidates: Dict[str, str] = {}
        for department in self._graph.names_of_kind(NodeKind.DEPARTMENT):
            if department_filter not in department:
                continue
            for program in self._graph.successors(
                NodeKind.DEPARTMENT, department, Relation.OFFERS, target_kind=NodeKind.PROGRAM
            ):
                candidates.setdefault(program, department)
        return candidates

    # -------------------------------------------------------------------------
    # 상세 정보 구성
    # -------------------------------------------------------------------------
    def describe_program(
        self,
        program: str,
        department: Optional[str] = None,
        path_distance: int = 0,
    ) -> ProgramDetails:
        """
        단일 홉 조회로 프로그램의 소속, 요건, 선수 과정, 진로를 채웁니다.

        @param program 프로그램 이름.
        @param department 개설 학과. None이면 그래프에서 찾는다.
        @param path_distance 경로 거리.
        @returns ProgramDetails.
        """
        graph = self._graph
        if department is None:
            departments = graph.predecessors(
                NodeKind.PROGRAM, program, Relation.OFFERS, source_kind=NodeKind.DEPARTMENT
            )
            department = departments[0] if departments else ""

        faculty = ""
        institute = ""
        if department:
            faculties = graph.predecessors(NodeKind.DEPARTMENT, department, Relation.HAS_DEPARTMENT)
            faculty = faculties[0] if faculties else ""
        if faculty:
            institutes = graph.predecessors(NodeKind.FACULTY, faculty, Relation.HAS_FACULTY)
            institute = institutes[0] if institutes else ""
        if not institute:
            # 학부 없이 기관이 직접 개설하는 프로그램
            institutes = graph.predecessors(
                NodeKind.PROGRAM, program, Relation.OFFERS, source_kind=NodeKind.INSTITUTE
            )
            institute = institutes[0] if institutes else ""

        attributes = graph.node_attributes(NodeKind.PROGRAM, program)
        return ProgramDetails(
            name=program,
            institute=institute,
            faculty=faculty,
            department=department,
            requirements=graph.successors(NodeKind.PROGRAM, program, Relation.REQUIRES),
            prerequisites=graph.predecessors(NodeKind.PROGRAM, program, Relation.IS_PREREQUISITE_FOR),
            career_paths=graph.successors(NodeKind.PROGRAM, program, Relation.LEADS_TO),
            path_distance=path_distance,
            tier=classify_tier(program, attributes.get("tier")),
        )
