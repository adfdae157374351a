"""Reported outcomes.

Protocol rejections, unmet preconditions and mapper results are values,
not exceptions. The API decides how to present them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

SUCCESS = "success"
INFO = "info"
WARNING = "warning"
ERROR = "error"


@dataclass
class Outcome:
    ok: bool
    code: str
    message: str
    level: str = INFO
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, code: str, message: str, level: str = SUCCESS, **data) -> "Outcome":
        return cls(ok=True, code=code, message=message, level=level, data=data)

    @classmethod
    def rejected(cls, code: str, message: str, level: str = WARNING, **data) -> "Outcome":
        return cls(ok=False, code=code, message=message, level=level, data=data)

    @classmethod
    def from_error(cls, error, level: str = ERROR) -> "Outcome":
        """Wrap an ArchShiftError."""
        return cls(ok=False, code=error.code, message=error.message, level=level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "code": self.code,
            "message": self.message,
            "level": self.level,
            **self.data,
        }
