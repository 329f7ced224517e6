from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TreeNode:
    """A node of a hash tree.

    - Leaf: ``data`` is the item content and ``hash == sha256_hex(data)``.
    - Internal: ``data`` is the node's own hex hash (the value fed upward).
      With two children the hash is the double hash of ``left.hash + right.hash``;
      with only ``left`` the hash is ``left.hash`` unchanged.

    Nodes are immutable and each one is referenced by exactly one parent.
    """

    data: str
    hash: str
    left: Optional["TreeNode"] = field(default=None, repr=False)
    right: Optional["TreeNode"] = field(default=None, repr=False)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_promoted(self) -> bool:
        """True for an internal node carrying a single unpaired child."""

        return self.left is not None and self.right is None
