"""
Detective: imports and functions.

Python files are read with the `ast` module; JavaScript and TypeScript
files with regular expressions. Only imports that resolve to a file the
archaeologist found become dependencies; external packages are dropped.
"""

import ast
import os
import re
from typing import Iterable, List, Optional, Set, Tuple

from ..graph.models import function_node_id
from ..knowledge import (
    Collaborator,
    Dependency,
    ExtractionFinding,
    FunctionRecord,
    WorkspaceFinding,
)
from .base import Agent

JS_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")

_JS_IMPORT = re.compile(
    r"""(?:import\s+(?:[\w*{}\s,$]+\s+from\s+)?['"]([^'"]+)['"]"""
    r"""|require\s*\(\s*['"]([^'"]+)['"]\s*\))"""
)

_JS_FUNCTION_PATTERNS = [
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)\s*\("),
    re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)"),
    re.compile(r"^\s*(?:public\s+|private\s+|protected\s+|static\s+|async\s+)*([A-Za-z_$][\w$]*)\s*\([^)]*\)\s*(?::\s*[^{]+)?\{"),
]

_JS_CALL = re.compile(r"\b([A-Za-z_$][\w$]*)\s*\(")

_JS_KEYWORDS = {
    "if", "for", "while", "switch", "catch", "function", "return", "typeof",
    "new", "await", "super", "constructor", "else", "do", "try", "with",
    "import", "require", "delete", "void", "yield",
}


class DetectiveAgent(Agent):
    collaborator = Collaborator.DETECTIVE
    priority = 2

    async def explore(self, workspace_path: str) -> None:
        self.log("Starting exploration...")

        workspace = self.knowledge.get(WorkspaceFinding)
        if workspace is None or not workspace.files:
            self.log("No files found from archaeologist. Aborting.")
            return

        root = os.path.abspath(workspace_path)
        known_files = set(workspace.files)
        dependencies: List[Dependency] = []
        functions: List[FunctionRecord] = []

        async for path, content in self.read_files(workspace.files):
            deps, funcs = self.extract(path, content, root, known_files)
            dependencies.extend(deps)
            functions.extend(funcs)

        self.knowledge.store(ExtractionFinding(dependencies=dependencies, functions=functions))
        self.log(
            f"Exploration complete. Found {len(dependencies)} dependencies "
            f"and {len(functions)} functions."
        )

    def extract(
        self,
        path: str,
        content: str,
        root: str,
        known_files: Set[str],
    ) -> Tuple[List[Dependency], List[FunctionRecord]]:
        ext = os.path.splitext(path)[1].lower()
        if ext == ".py":
            return self._extract_python(path, content, root, known_files)
        if ext in JS_EXTENSIONS:
            return self._extract_js(path, content, known_files)
        return [], []

    # ─── Python ───────────────────────────────────

    def _extract_python(self, path, content, root, known_files):
        try:
            tree = ast.parse(content)
        except (SyntaxError, ValueError) as e:
            self.log(f"Could not parse {path}: {e}")
            return [], []

        targets: List[str] = []
        for node in ast.walk(tree):
            for candidates in _python_import_candidates(node, path, root):
                resolved = next((c for c in candidates if c in known_files), None)
                if resolved and resolved != path and resolved not in targets:
                    targets.append(resolved)

        dependencies = [Dependency(from_file=path, to_file=target) for target in targets]

        definitions = [
            node for node in ast.walk(tree)
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        definitions.sort(key=lambda n: (n.lineno, n.col_offset))

        functions = [
            FunctionRecord(
                id=function_node_id(path, node.name, node.lineno),
                name=node.name,
                file=path,
                start_line=node.lineno,
                calls=_python_calls(node),
            )
            for node in definitions
        ]
        return dependencies, functions

    # ─── JavaScript / TypeScript ──────────────────

    def _extract_js(self, path, content, known_files):
        dependencies: List[Dependency] = []
        seen: Set[str] = set()
        for match in _JS_IMPORT.finditer(content):
            specifier = match.group(1) or match.group(2)
            if not specifier.startswith("."):
                continue
            resolved = _resolve_js_module(specifier, path, known_files)
            if resolved and resolved != path and resolved not in seen:
                seen.add(resolved)
                dependencies.append(Dependency(from_file=path, to_file=resolved))

        lines = content.split("\n")
        starts: List[Tuple[int, str]] = []
        for index, line in enumerate(lines):
            name = _js_function_name(line)
            if name:
                starts.append((index, name))

        functions = []
        for position, (index, name) in enumerate(starts):
            end = starts[position + 1][0] if position + 1 < len(starts) else len(lines)
            body = "\n".join(lines[index:end])
            functions.append(FunctionRecord(
                id=function_node_id(path, name, index + 1),
                name=name,
                file=path,
                start_line=index + 1,
                calls=_js_calls(body, name),
            ))
        return dependencies, functions


def _python_import_candidates(node: ast.AST, path: str, root: str) -> Iterable[List[str]]:
    """
    Candidate file paths for each name an import statement brings in,
    most likely first.
    """
    if isinstance(node, ast.Import):
        for alias in node.names:
            yield _module_paths(alias.name, [os.path.dirname(path), root])
    elif isinstance(node, ast.ImportFrom):
        if node.level:
            base = os.path.dirname(path)
            for _ in range(node.level - 1):
                base = os.path.dirname(base)
            bases = [base]
        else:
            bases = [os.path.dirname(path), root]

        module = node.module or ""
        module_paths = _module_paths(module, bases) if module else []
        for alias in node.names:
            # "from pkg import mod" may name a submodule
            submodule = f"{module}.{alias.name}" if module else alias.name
            yield _module_paths(submodule, bases) + module_paths


def _module_paths(module: str, bases: List[str]) -> List[str]:
    relative = os.path.join(*module.split("."))
    paths = []
    for base in bases:
        paths.append(os.path.join(base, relative + ".py"))
        paths.append(os.path.join(base, relative, "__init__.py"))
    return paths


def _python_calls(function: ast.AST) -> List[str]:
    """Names called in a function body, excluding nested definitions."""
    calls: List[str] = []
    stack = list(reversed(function.body))
    while stack:
        node = stack.pop()
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
            continue
        if isinstance(node, ast.Call):
            name = _call_name(node.func)
            if name and name not in calls:
                calls.append(name)
        # Reversed so calls come out in source order
        stack.extend(reversed(list(ast.iter_child_nodes(node))))
    return calls


def _call_name(func: ast.AST) -> Optional[str]:
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


def _resolve_js_module(specifier: str, path: str, known_files: Set[str]) -> Optional[str]:
    base = os.path.normpath(os.path.join(os.path.dirname(path), specifier))
    candidates = [base] + [base + ext for ext in JS_EXTENSIONS]
    candidates += [os.path.join(base, "index" + ext) for ext in JS_EXTENSIONS]
    for candidate in candidates:
        if candidate in known_files:
            return candidate
    return None


def _js_function_name(line: str) -> Optional[str]:
    for pattern in _JS_FUNCTION_PATTERNS:
        match = pattern.match(line)
        if match and match.group(1) not in _JS_KEYWORDS:
            return match.group(1)
    return None


def _js_calls(body: str, own_name: str) -> List[str]:
    calls: List[str] = []
    # Skip the definition line itself
    _, _, rest = body.partition("\n")
    for match in _JS_CALL.finditer(rest):
        name = match.group(1)
        if name in _JS_KEYWORDS or name in calls:
            continue
        calls.append(name)
    return calls
