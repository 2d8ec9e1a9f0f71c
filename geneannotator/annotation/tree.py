"""
Rooted tree carrying per-site genotype vectors
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence


@dataclass(eq=False)
class Node:

    id: int
    children: List['Node'] = field(default_factory=list)
    name: Optional[str] = None
    branch_length: Optional[float] = None
    genotypes: Optional[Sequence[Any]] = None
    parent: Optional['Node'] = field(default=None, repr=False)

    def __post_init__(self):
        for child in self.children:
            child.parent = self

    def add_child(self, node: 'Node') -> 'Node':
        node.parent = self
        self.children.append(node)
        return node

    def is_root(self) -> bool:
        return self.parent is None

    def is_leaf(self) -> bool:
        return not self.children

    def iter_preorder(self) -> Iterator['Node']:
        # iterative so very deep trees do not hit the recursion limit
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> List['Node']:
        return [n for n in self.iter_preorder() if n.is_leaf()]

    def find(self, node_id: int) -> Optional['Node']:
        for node in self.iter_preorder():
            if node.id == node_id:
                return node
        return None

    def __repr__(self):
        return f"Node({self.id}, '{self.name}')" if self.name else f"Node({self.id})"


def count_nodes(root: Node) -> int:
    return sum(1 for _ in root.iter_preorder())


def index_nodes(root: Node) -> Dict[int, Node]:
    """Map node ids to nodes; ids must be unique"""
    nodes: Dict[int, Node] = {}
    for node in root.iter_preorder():
        if node.id in nodes:
            raise ValueError(f"Duplicate node id in tree: {node.id}")
        nodes[node.id] = node
    return nodes
