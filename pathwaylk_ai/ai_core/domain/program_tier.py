from __future__ import annotations

from enum import IntEnum
from typing import Optional, Union


class ProgramTier(IntEnum):
    """경로 표시 순서를 정하는 프로그램 단계 (값이 작을수록 앞)."""

    NVQ_LEVEL_3 = 1
    NVQ_LEVEL_4 = 2
    ADVANCED_CERTIFICATE = 3
    CERTIFICATE = 4
    BACHELOR = 5
    BSC = 6
    OTHER = 7


# 우선순위 순서대로 검사한다. "Advanced Certificate"는 "Certificate"보다 먼저 와야 한다.
_NAME_MARKERS = (
    ("NVQ Level 3", ProgramTier.NVQ_LEVEL_3),
    ("NVQ Level 4", ProgramTier.NVQ_LEVEL_4),
    ("Advanced Certificate", ProgramTier.ADVANCED_CERTIFICATE),
    ("Certificate", ProgramTier.CERTIFICATE),
    ("Bachelor", ProgramTier.BACHELOR),
    ("BSc", ProgramTier.BSC),
)


def classify_tier(program_name: str, explicit: Optional[Union[str, int, ProgramTier]] = None) -> ProgramTier:
    """
    프로그램 단계를 결정합니다.

    그래프 노드에 명시적인 tier 속성이 있으면 그것을 우선 사용하고,
    없으면 프로그램 이름의 부분 문자열로 추정합니다.

    @param {str} program_name - 프로그램 이름.
    @param {Optional[Union[str, int, ProgramTier]]} explicit - 노드에 저장된 tier 속성.
    @returns {ProgramTier} 결정된 단계.
    """
    if explicit is not None:
        tier = _coerce_tier(explicit)
        if tier is not None:
            return tier
    for marker, tier in _NAME_MARKERS:
        if marker in program_name:
            return tier
    return ProgramTier.OTHER


def _coerce_tier(value: Union[str, int, ProgramTier]) -> Optional[ProgramTier]:
    """
    @param value tier 속성 값 (enum, 정수, 또는 enum 이름).
    @returns ProgramTier 또는 해석 불가 시 None.
    """
    if isinstance(value, ProgramTier):
        return value
    if isinstance(value, int):
        try:
            return ProgramTier(value)
        except ValueError:
            return None
    try:
        return ProgramTier[str(value).strip().upper()]
    except KeyError:
        return None
