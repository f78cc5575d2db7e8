# src/repocat/core/tree.py
from typing import Dict, List, Optional

TreeNode = Dict[str, Optional["TreeNode"]]


def build_tree(rel_paths: List[str]) -> TreeNode:
    """Nests posix relative paths; directories map to dicts, files to None."""
    tree: TreeNode = {}
    for rel_path in rel_paths:
        *dirs, name = rel_path.split("/")
        level = tree
        for d in dirs:
            level = level.setdefault(d, {})
        level[name] = None
    return tree


def generate_project_tree(rel_paths: List[str], root_name: str) -> str:
    """
    Renders the emitted files as an ASCII tree. Files are listed before
    subdirectories at each level, matching the order blocks are written in.
    """
    lines = ["--- Project Tree ---", f"{root_name}/"]

    def _render(subtree: TreeNode, prefix: str):
        entries = sorted(subtree.items(), key=lambda kv: (kv[1] is not None, kv[0]))
        for i, (name, child) in enumerate(entries):
            is_last = i == len(entries) - 1
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{name}{'/' if child is not None else ''}")
            if child:
                _render(child, prefix + ("    " if is_last else "│   "))

    _render(build_tree(rel_paths), "")
    return "\n".join(lines) + "\n"
