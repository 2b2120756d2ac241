from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class EducationPath:
    """자격 → 프로그램 → 직업으로 이어지는 교육 경로."""

    programs: List[str] = field(default_factory=list)
    qualifications: List[str] = field(default_factory=list)
    careers: List[str] = field(default_factory=list)
    institute: str = ""
    faculty: str = ""
    department: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "programs": list(self.programs),
            "qualifications": list(self.qualifications),
            "careers": list(self.careers),
            "institute": self.institute,
            "faculty": self.faculty,
            "department": self.department,
        }
