from __future__ import annotations

from typing import List


class RevenueEngineError(Exception):
    pass


class InputValidationError(RevenueEngineError):
    def __init__(self, issues: List[str]) -> None:
        self.issues = list(issues)
        super().__init__("Invalid revenue engine input: " + "; ".join(self.issues))
