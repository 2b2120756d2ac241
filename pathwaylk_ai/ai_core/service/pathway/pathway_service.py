from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pathwaylk_ai.ai_core.domain.education_path import EducationPath
from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation
from pathwaylk_ai.ai_core.domain.program_details import ProgramDetails
from pathwaylk_ai.ai_core.repository.graph_store import GraphStore
from pathwaylk_ai.ai_core.service.pathway.pathway_resolver import PathwayResolver

logger = logging.getLogger(__name__)


class PathwayService:
    """교육 기관/프로그램/진로 카탈로그 조회 서비스."""

    def __init__(self, graph: GraphStore, resolver: Optional[PathwayResolver] = None) -> None:
        """
        @param {GraphStore} graph - 교육 경로 그래프.
        @param {Optional[PathwayResolver]} resolver - 경로 탐색기. 없으면 기본 깊이로 생성.
        @returns {None} 서비스를 초기화합니다.
        """
        self._graph = graph
        self._resolver = resolver or PathwayResolver(graph)

    @property
    def resolver(self) -> PathwayResolver:
        return self._resolver

    def get_all_institutes(self) -> List[str]:
        """
        @returns {List[str]} 기관 이름 목록 (이름순).
        """
        return self._graph.names_of_kind(NodeKind.INSTITUTE)

    def get_programs_by_institute(self, institute: str) -> List[ProgramDetails]:
        """
        기관이 학부/학과를 거쳐 또는 직접 개설하는 프로그램을 조회합니다.

        @param {str} institute - 기관 이름.
        @returns {List[ProgramDetails]} 단계 → 이름 순 프로그램 목록.
        """
        graph = self._graph
        offered: Dict[str, Optional[str]] = {
            program: None
            for program in graph.successors(
                NodeKind.INSTITUTE, institute, Relation.OFFERS, target_kind=NodeKind.PROGRAM
            )
        }
        for faculty in graph.successors(NodeKind.INSTITUTE, institute, Relation.HAS_FACULTY):
            for department in graph.successors(NodeKind.FACULTY, faculty, Relation.HAS_DEPARTMENT):
                for program in graph.successors(NodeKind.DEPARTMENT, department, Relation.OFFERS):
                    offered.setdefault(program, department)
        details = [self._resolver.describe_program(program, department=department) for program, department in offered.items()]
        return _order_by_tier(details)

    def get_program_details(self, program: str) -> Optional[ProgramDetails]:
        """
        @param {str} program - 프로그램 이름.
        @returns {Optional[ProgramDetails]} 상세 정보. 없는 프로그램이면 None.
        """
        if not self._graph.has_node(NodeKind.PROGRAM, program):
            return None
        return self._resolver.describe_program(program)

    def get_prerequisites(self, program: str) -> List[str]:
        """
        로드맵 생성 프롬프트에 넣을 선수 조건을 조회합니다.

        @param {str} program - 프로그램 이름.
        @returns {List[str]} 선수 프로그램 다음에 요구 자격을 이어 붙인 목록. 없는 프로그램이면 빈 리스트.
        """
        details = self.get_program_details(program)
        if details is None:
            return []
        combined: List[str] = []
        for item in details.prerequisites + details.requirements:
            if item not in combined:
                combined.append(item)
        return combined

    def get_all_careers(self) -> List[str]:
        return self._graph.names_of_kind(NodeKind.CAREER)

    def get_career_paths(self, qualifications: List[str]) -> List[EducationPath]:
        """
        보유 자격 중 하나라도 직접 요구하는 프로그램과 그 진로를 조회합니다.

        @param {List[str]} qualifications - 보유 자격 목록.
        @returns {List[EducationPath]} 프로그램 이름순 교육 경로 목록.
        """
        cleaned = [item.strip() for item in qualifications if item and item.strip()]
        if not cleaned:
            raise ValueError("at least one qualification is required")
        programs = set()
        for qualification in cleaned:
            programs.update(
                self._graph.predecessors(
                    NodeKind.QUALIFICATION, qualification, Relation.REQUIRES, source_kind=NodeKind.PROGRAM
                )
            )
        paths = []
        for program in sorted(programs):
            details = self._resolver.describe_program(program)
            paths.append(
                EducationPath(
                    programs=[program],
                    qualifications=details.requirements,
                    careers=details.career_paths,
                    institute=details.institute,
                    faculty=details.faculty,
                    department=details.department,
                )
            )
        return paths

    def get_pathway_to_career(self, career_title: str) -> List[EducationPath]:
        """
        @param {str} career_title - 직업 이름.
        @returns {List[EducationPath]} 선수 프로그램 → 대상 프로그램 순서의 경로 목록.
        """
        paths = []
        for program in self._graph.predecessors(
            NodeKind.CAREER, career_title, Relation.LEADS_TO, source_kind=NodeKind.PROGRAM
        ):
            details = self._resolver.describe_program(program)
            paths.append(
                EducationPath(
                    programs=details.prerequisites + [program],
                    qualifications=details.requirements,
                    careers=[career_title],
                    institute=details.institute,
                    faculty=details.faculty,
                    department=details.department,
                )
            )
        return paths

    def get_complete_pathway(self, department: str) -> List[ProgramDetails]:
        """
        @param {str} department - 학과 이름 (정확히 일치).
        @returns {List[ProgramDetails]} 학과 개설 프로그램 (단계 → 이름 순).
        """
        programs = self._graph.successors(
            NodeKind.DEPARTMENT, department, Relation.OFFERS, target_kind=NodeKind.PROGRAM
        )
        return _order_by_tier([self._resolver.describe_program(program, department=department) for program in programs])

    def get_pathway_by_qualification(self, department_filter: str, qualification: str) -> List[ProgramDetails]:
        return self._resolver.resolve_pathway(department_filter, qualification)

    def health_check(self) -> Dict[str, Any]:
        """
        @returns {Dict[str, Any]} 그래프 상태와 노드/간선 수.
        """
        healthy = self._graph.is_healthy()
        if not healthy:
            logger.warning("교육 그래프 상태 이상")
        return {
            "graph": healthy,
            "nodes": self._graph.node_count,
            "edges": self._graph.edge_count,
        }


def _order_by_tier(details: List[ProgramDetails]) -> List[ProgramDetails]:
    return sorted(details, key=lambda item: (item.tier, item.name))
