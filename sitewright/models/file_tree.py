# sitewright/models/file_tree.py
"""
In-memory project file tree.

The root of a tree is a ``DirectoryNode``. Every leaf is a ``FileNode``;
directories may be empty. Paths are ``/``-joined segment names resolved
from the root.

The persisted layout is the WebContainer mount format::

    {"src": {"directory": {"App.tsx": {"file": {"contents": "..."}}}}}
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Union

from sitewright.core.errors import (
    NotADirError,
    NotAFileError,
    NotFoundError,
    PathResolutionError,
    TreeFormatError,
)


@dataclass
class FileNode:
    contents: str = ""


@dataclass
class DirectoryNode:
    children: Dict[str, "Node"] = field(default_factory=dict)


Node = Union[FileNode, DirectoryNode]

# Alias used at API boundaries: a tree is its root directory.
FileSystemTree = DirectoryNode


def split_path(path: str) -> List[str]:
    p = (path or "").strip()
    while p.startswith("./"):
        p = p[2:]
    p = p.lstrip("/")
    parts = [s for s in p.split("/") if s and s != "."]
    if not parts:
        raise NotFoundError(path)
    if ".." in parts:
        raise PathResolutionError(path, f"Path must not contain '..': {path}")
    return parts


def normalize_path(path: str) -> str:
    """Canonical ``/``-joined form of a path, as ``read_file`` and ``write_file`` resolve it."""
    return "/".join(split_path(path))


def _walk(node: Node, prefix: str) -> Iterator[str]:
    if isinstance(node, FileNode):
        yield prefix
    elif isinstance(node, DirectoryNode):
        for name, child in node.children.items():
            yield from _walk(child, f"{prefix}/{name}" if prefix else name)
    else:
        raise TreeFormatError(f"Unknown node type at {prefix or '/'}: {type(node).__name__}")


def iter_paths(tree: FileSystemTree) -> Iterator[str]:
    """Depth-first file paths in insertion order; directories are not listed."""
    for name, child in tree.children.items():
        yield from _walk(child, name)


def list_paths(tree: FileSystemTree) -> List[str]:
    return list(iter_paths(tree))


def _resolve(tree: FileSystemTree, path: str) -> Node:
    node: Node = tree
    for part in split_path(path):
        if isinstance(node, FileNode):
            raise NotADirError(path)
        child = node.children.get(part)
        if child is None:
            raise NotFoundError(path)
        node = child
    return node


def read_file(tree: FileSystemTree, path: str) -> str:
    node = _resolve(tree, path)
    if isinstance(node, DirectoryNode):
        raise NotAFileError(path)
    return node.contents


def exists(tree: FileSystemTree, path: str) -> bool:
    try:
        read_file(tree, path)
    except PathResolutionError:
        return False
    return True


def write_file(tree: FileSystemTree, path: str, contents: str) -> None:
    parts = split_path(path)
    node: DirectoryNode = tree
    for part in parts[:-1]:
        child = node.children.get(part)
        if child is None:
            child = DirectoryNode()
            node.children[part] = child
        elif isinstance(child, FileNode):
            raise NotADirError(path)
        node = child

    leaf = node.children.get(parts[-1])
    if isinstance(leaf, DirectoryNode):
        raise NotAFileError(path)
    if leaf is None:
        node.children[parts[-1]] = FileNode(contents=contents)
    else:
        leaf.contents = contents


def clone(tree: FileSystemTree) -> FileSystemTree:
    return copy.deepcopy(tree)


def _node_from_json(name: str, obj: Any) -> Node:
    if not isinstance(obj, dict):
        raise TreeFormatError(f"Node {name!r} must be an object")
    if "file" in obj:
        f = obj["file"]
        if not isinstance(f, dict) or not isinstance(f.get("contents"), str):
            raise TreeFormatError(f"File node {name!r} must carry string contents")
        return FileNode(contents=f["contents"])
    if "directory" in obj:
        d = obj["directory"]
        if not isinstance(d, dict):
            raise TreeFormatError(f"Directory node {name!r} must map names to nodes")
        return DirectoryNode(children={k: _node_from_json(k, v) for k, v in d.items()})
    raise TreeFormatError(f"Node {name!r} is neither a file nor a directory")


def tree_from_json(obj: Any) -> FileSystemTree:
    if obj is None:
        return DirectoryNode()
    if not isinstance(obj, dict):
        raise TreeFormatError("File tree must be an object")
    return DirectoryNode(children={k: _node_from_json(k, v) for k, v in obj.items()})


def _node_to_json(node: Node) -> Dict[str, Any]:
    if isinstance(node, FileNode):
        return {"file": {"contents": node.contents}}
    if isinstance(node, DirectoryNode):
        return {"directory": {k: _node_to_json(v) for k, v in node.children.items()}}
    raise TreeFormatError(f"Unknown node type: {type(node).__name__}")


def tree_to_json(tree: FileSystemTree) -> Dict[str, Any]:
    return {k: _node_to_json(v) for k, v in tree.children.items()}
