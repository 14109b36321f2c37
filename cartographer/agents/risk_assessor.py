"""
Risk assessor: line-level scan for secrets, leftover debt and oversized files.
"""

import re
from typing import List

from ..knowledge import Collaborator, RiskFinding, RiskItem, WorkspaceFinding
from .base import Agent

SECURITY_PATTERNS = [
    (re.compile(r"api_?key\s*=\s*['\"][A-Za-z0-9_\-]{20,}['\"]", re.IGNORECASE), "Potential hardcoded API key"),
    (re.compile(r"password\s*=\s*['\"][^'\"]{3,}['\"]", re.IGNORECASE), "Potential hardcoded password"),
    (re.compile(r"secret\s*=\s*['\"][^'\"]{3,}['\"]", re.IGNORECASE), "Potential hardcoded secret"),
]

DEBT_PATTERNS = [
    (re.compile(r"(?:#|//).*\bTODO\b"), "TODO comment found"),
    (re.compile(r"(?:#|//).*\bFIXME\b"), "FIXME comment found"),
    (re.compile(r"\bconsole\.log\s*\("), "Console log found (production risk)"),
    (re.compile(r"\b(?:pdb\.set_trace|breakpoint)\s*\(\s*\)"), "Debugger breakpoint left in code"),
]


class RiskAssessorAgent(Agent):
    collaborator = Collaborator.RISK_ASSESSOR
    priority = 3

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting risk assessment...")

        workspace = self.knowledge.get(WorkspaceFinding)
        if workspace is None or not workspace.files:
            self.log("No files to analyze. Aborting.")
            return

        risks: List[RiskItem] = []
        async for path, content in self.read_files(workspace.files):
            risks.extend(self.assess(path, content))

        self.knowledge.store(RiskFinding(risks=risks))
        self.log(f"Risk assessment complete. Found {len(risks)} issues.")

    def assess(self, path: str, content: str) -> List[RiskItem]:
        risks = []
        lines = content.split("\n")

        for number, line in enumerate(lines, start=1):
            for pattern, message in SECURITY_PATTERNS:
                if pattern.search(line):
                    risks.append(RiskItem(path, number, "SECURITY", message, "HIGH"))
            for pattern, message in DEBT_PATTERNS:
                if pattern.search(line):
                    risks.append(RiskItem(path, number, "TECH_DEBT", message, "LOW"))

        if len(lines) > self.config.max_file_lines:
            risks.append(RiskItem(
                path, 0, "COMPLEXITY", f"File is too long ({len(lines)} lines)", "MEDIUM"
            ))
        return risks
