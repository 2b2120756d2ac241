from __future__ import annotations

from typing import Dict, List, Tuple

from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation
from pathwaylk_ai.ai_core.repository.graph_store import GraphStore

OUSL = "The Open University of Sri Lanka"
VTA = "Vocational Training Authority (VTA)"
ENGINEERING_FACULTY = "Faculty of Engineering Technology"

OL_PASS = "G.C.E. (O/L) Examination Pass"
OL_NOT_PASSED = "G.C.E. (O/L) Examination Not Passed"
AL_PASS = "G.C.E. (A/L) Examination Pass"
AGE_REQUIREMENT = "Age Requirement"
ADVANCED_CERTIFICATE_DONE = "Completion of Advanced Certificate in Science"
NVQ3_DONE = "Completion of NVQ Level 3 Program"
NVQ4_DONE = "Completion of NVQ Level 4 Program (O/L Equivalent)"

ADVANCED_CERTIFICATE = "Advanced Certificate in Science"
NVQ3_ICT = "ICT Technician (NVQ Level 3)"
NVQ4_HARDWARE = "Computer Hardware Technician (NVQ Level 4)"

# 학과 → 개설 학위 과정
DEPARTMENT_PROGRAMS: Dict[str, List[str]] = {
    "Civil Engineering": ["Civil Engineering Degree Programme"],
    "Agricultural and Plantation Engineering": [
        "Bachelor of Technology Honours in Agricultural Engineering",
        "Bachelor of Industrial Studies Honours in Agriculture",
    ],
    "Electrical and Computer Engineering": [
        "Bachelor of Software Engineering Honours",
        "BSc Honours in Engineering - Computer Engineering",
        "BSc Honours in Engineering - Electrical Engineering",
        "BSc Honours in Engineering - Electronics and Communication Engineering",
    ],
    "Mechanical Engineering": [
        "Mechanical Engineering Degree Programme",
        "Mechatronics Engineering Degree Programme",
    ],
    "Textile and Apparel Technology": ["Textile and Apparel Technology Degree Programme"],
}

PROGRAM_REQUIREMENTS: Dict[str, List[str]] = {
    NVQ3_ICT: [OL_NOT_PASSED],
    NVQ4_HARDWARE: [NVQ3_DONE],
    ADVANCED_CERTIFICATE: [OL_PASS, NVQ4_DONE, AGE_REQUIREMENT],
}

PROGRAM_CAREERS: Dict[str, List[str]] = {
    "Bachelor of Software Engineering Honours": [
        "Software Engineer",
        "Quality Assurance Engineer",
        "DevOps Engineer",
    ],
    "BSc Honours in Engineering - Computer Engineering": [
        "Software Engineer",
        "Hardware Engineer",
        "Network Administrator",
    ],
    NVQ4_HARDWARE: ["Hardware Engineer"],
    "Civil Engineering Degree Programme": ["Civil Engineer", "Structural Engineer"],
}

PREREQUISITE_CHAINS: List[Tuple[str, str]] = [(NVQ3_ICT, NVQ4_HARDWARE)]


def degree_programs() -> List[str]:
    """
    @returns 모든 학과 학위 과정 이름 목록.
    """
    return [program for programs in DEPARTMENT_PROGRAMS.values() for program in programs]


def build_seed_graph() -> GraphStore:
    """
    스리랑카 공개대학교(OUSL)와 직업훈련청(VTA)의 기본 교육 경로 그래프를 구성합니다.

    Advanced Certificate in Science는 학과 소속이 아니므로 OUSL이 직접 개설합니다.

    @returns {GraphStore} 시드 데이터가 채워진 그래프.
    """
    store = GraphStore()

    store.add_relation(NodeKind.INSTITUTE, OUSL, Relation.HAS_FACULTY, NodeKind.FACULTY, ENGINEERING_FACULTY)
    store.add_relation(NodeKind.INSTITUTE, OUSL, Relation.OFFERS, NodeKind.PROGRAM, ADVANCED_CERTIFICATE)
    store.add_relation(NodeKind.INSTITUTE, VTA, Relation.OFFERS, NodeKind.PROGRAM, NVQ3_ICT)
    store.add_relation(NodeKind.INSTITUTE, VTA, Relation.OFFERS, NodeKind.PROGRAM, NVQ4_HARDWARE)

    for department, programs in DEPARTMENT_PROGRAMS.items():
        store.add_relation(
            NodeKind.FACULTY, ENGINEERING_FACULTY, Relation.HAS_DEPARTMENT, NodeKind.DEPARTMENT, department
        )
        for program in programs:
            store.add_relation(NodeKind.DEPARTMENT, department, Relation.OFFERS, NodeKind.PROGRAM, program)

    requirements = dict(PROGRAM_REQUIREMENTS)
    for program in degree_programs():
        requirements[program] = [ADVANCED_CERTIFICATE_DONE, AL_PASS]
    for program, qualifications in requirements.items():
        for qualification in qualifications:
            store.add_relation(NodeKind.PROGRAM, program, Relation.REQUIRES, NodeKind.QUALIFICATION, qualification)

    chains = list(PREREQUISITE_CHAINS) + [(ADVANCED_CERTIFICATE, program) for program in degree_programs()]
    for source, target in chains:
        store.add_relation(NodeKind.PROGRAM, source, Relation.IS_PREREQUISITE_FOR, NodeKind.PROGRAM, target)

    for program, careers in PROGRAM_CAREERS.items():
        for career in careers:
            store.add_relation(NodeKind.PROGRAM, program, Relation.LEADS_TO, NodeKind.CAREER, career)

    return store
