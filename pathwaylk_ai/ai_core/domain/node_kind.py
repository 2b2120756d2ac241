from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    """교육 지식 그래프의 노드 종류."""

    INSTITUTE = "Institute"
    FACULTY = "Faculty"
    DEPARTMENT = "Department"
    PROGRAM = "Program"
    QUALIFICATION = "Qualification"
    CAREER = "Career"


class Relation(str, Enum):
    """교육 지식 그래프의 방향성 관계 종류."""

    HAS_FACULTY = "HAS_FACULTY"
    HAS_DEPARTMENT = "HAS_DEPARTMENT"
    OFFERS = "OFFERS"
    REQUIRES = "REQUIRES"
    IS_PREREQUISITE_FOR = "IS_PREREQUISITE_FOR"
    LEADS_TO = "LEADS_TO"
