"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — SNAPSHOT MODEL                      ║
║                                                                  ║
║  The backend publishes the whole tree as one JSON document.      ║
║  This module decodes it into small immutable records and         ║
║  resolves typed node references against the node tables.         ║
║                                                                  ║
║  Wire format (GET /data)                                         ║
║  ───────────────────────                                         ║
║  { "node_capacity"  : int,                                       ║
║    "root_node"      : {"node_type": "inner"|"leaf", "index": n}, ║
║    "leaf_nodes"     : [{"keys": [...]}, ...],                    ║
║    "inner_nodes"    : [{"keys": [...], "children": [ref, ...]}], ║
║    "to_insert"      : key | null,                                ║
║    "to_insert_child": ref | null,                                ║
║    "to_delete"      : key | null,                                ║
║    "to_merge"       : {"parent_node": ref, "key_idx": n} | null, ║
║    "target"         : ref | null }                               ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════
#  ERRORS
# ══════════════════════════════════════════════════════════════

class SnapshotError(ValueError):
    """The snapshot cannot be laid out."""


class InvalidNodeKind(SnapshotError):
    """A node reference carries an unknown type tag."""


class DanglingReference(SnapshotError):
    """A node reference points outside its table."""


# ══════════════════════════════════════════════════════════════
#  NODE REFERENCES
# ══════════════════════════════════════════════════════════════

class NodeKind(Enum):
    INNER = "inner"
    LEAF = "leaf"


@dataclass(frozen=True)
class NodeRef:
    """Typed pointer into one of the snapshot's node tables."""

    kind: NodeKind
    index: int

    @classmethod
    def from_json(cls, data: dict) -> "NodeRef":
        tag = data.get("node_type")
        try:
            kind = NodeKind(tag)
        except ValueError:
            raise InvalidNodeKind(f"unexpected node type {tag!r}") from None
        try:
            return cls(kind, int(data["index"]))
        except KeyError:
            raise SnapshotError(f"{tag} reference is missing 'index'") from None
        except (TypeError, ValueError):
            raise SnapshotError(
                f"{tag} reference has a bad index {data['index']!r}") from None

    def __str__(self) -> str:
        return f"{self.kind.value}[{self.index}]"


def _opt_ref(data: Optional[dict]) -> Optional[NodeRef]:
    return None if data is None else NodeRef.from_json(data)


# ══════════════════════════════════════════════════════════════
#  NODE RECORDS + SNAPSHOT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NodeRecord:
    keys: Tuple[Any, ...]
    children: Optional[Tuple[NodeRef, ...]] = None

    @classmethod
    def from_json(cls, data: dict) -> "NodeRecord":
        keys = data.get("keys", ())
        if not isinstance(keys, (list, tuple)):
            raise SnapshotError(f"node keys must be a list, got {keys!r}")
        children = data.get("children")
        if children is not None:
            if not isinstance(children, (list, tuple)):
                raise SnapshotError(f"node children must be a list, got {children!r}")
            children = tuple(NodeRef.from_json(c) for c in children)
        return cls(tuple(keys), children)

    @property
    def is_leaf(self) -> bool:
        return self.children is None


@dataclass(frozen=True)
class MergeMarker:
    """Pending merge of ``parent.children[key_idx]`` with its right sibling."""

    parent_node: NodeRef
    key_idx: int


@dataclass(frozen=True)
class Snapshot:
    """
    One point-in-time view of the backend tree plus pending markers.

    Attributes:
        node_capacity   (int)              : Max keys per node.
        root_node       (NodeRef)          : Entry point of the main tree.
        leaf_nodes      (tuple[NodeRecord]): Leaf table.
        inner_nodes     (tuple[NodeRecord]): Inner table.
        to_insert       (key|None)         : Key waiting to be placed.
        to_insert_child (NodeRef|None)     : Sibling produced by a pending split.
        to_delete       (key|None)         : Key about to be removed.
        to_merge        (MergeMarker|None) : Pending merge.
        target          (NodeRef|None)     : Node the backend is working on.
    """

    node_capacity: int
    root_node: NodeRef
    leaf_nodes: Tuple[NodeRecord, ...] = ()
    inner_nodes: Tuple[NodeRecord, ...] = ()
    to_insert: Any = None
    to_insert_child: Optional[NodeRef] = None
    to_delete: Any = None
    to_merge: Optional[MergeMarker] = None
    target: Optional[NodeRef] = None

    @classmethod
    def from_json(cls, data: dict) -> "Snapshot":
        """
        Decode the ``/data`` payload.

        Raises:
            InvalidNodeKind: A reference has an unknown ``node_type``.
            SnapshotError:   A required field is missing.
        """
        try:
            capacity = int(data["node_capacity"])
            root = NodeRef.from_json(data["root_node"])
        except KeyError as exc:
            raise SnapshotError(f"snapshot is missing {exc.args[0]!r}") from None

        merge = data.get("to_merge")
        if merge is not None:
            merge = MergeMarker(NodeRef.from_json(merge["parent_node"]),
                                int(merge["key_idx"]))

        return cls(
            node_capacity=capacity,
            root_node=root,
            leaf_nodes=tuple(NodeRecord.from_json(n)
                             for n in data.get("leaf_nodes", ())),
            inner_nodes=tuple(NodeRecord.from_json(n)
                              for n in data.get("inner_nodes", ())),
            to_insert=data.get("to_insert"),
            to_insert_child=_opt_ref(data.get("to_insert_child")),
            to_delete=data.get("to_delete"),
            to_merge=merge,
            target=_opt_ref(data.get("target")),
        )


# ══════════════════════════════════════════════════════════════
#  NODE RESOLVER
# ══════════════════════════════════════════════════════════════

def resolve(ref: NodeRef, snapshot: Snapshot) -> NodeRecord:
    """
    Look up the record a reference points at.

    Args:
        ref:      Typed node reference.
        snapshot: Snapshot owning the node tables.

    Returns:
        The matching NodeRecord.

    Raises:
        InvalidNodeKind:   ``ref.kind`` is not INNER or LEAF.
        DanglingReference: ``ref.index`` is outside the table.
    """
    if ref.kind is NodeKind.INNER:
        table = snapshot.inner_nodes
    elif ref.kind is NodeKind.LEAF:
        table = snapshot.leaf_nodes
    else:
        raise InvalidNodeKind(f"unexpected node type {ref.kind!r}")

    # Python would happily wrap a negative index.
    if not 0 <= ref.index < len(table):
        raise DanglingReference(
            f"{ref} is outside the {ref.kind.value} table "
            f"({len(table)} entries)")
    return table[ref.index]


def merge_pair(snapshot: Snapshot) -> Tuple[NodeRef, ...]:
    """
    The two children a pending merge will combine.

    Returns an empty tuple when no merge is pending.

    Raises:
        DanglingReference: ``key_idx`` does not address two adjacent children.
    """
    marker = snapshot.to_merge
    if marker is None:
        return ()
    parent = resolve(marker.parent_node, snapshot)
    children = parent.children or ()
    if not 0 <= marker.key_idx < len(children) - 1:
        raise DanglingReference(
            f"merge key_idx {marker.key_idx} is out of range for "
            f"{marker.parent_node} with {len(children)} children")
    return children[marker.key_idx], children[marker.key_idx + 1]


# ══════════════════════════════════════════════════════════════
#  SUMMARY (status bar)
# ══════════════════════════════════════════════════════════════

def describe(snapshot: Snapshot) -> str:
    """One-line summary of the tables and any pending markers."""
    parts = [f"capacity {snapshot.node_capacity}",
             f"{len(snapshot.inner_nodes)} inner",
             f"{len(snapshot.leaf_nodes)} leaf"]
    if snapshot.to_insert is not None:
        parts.append(f"insert {snapshot.to_insert}")
    if snapshot.to_insert_child is not None:
        parts.append(f"split → {snapshot.to_insert_child}")
    if snapshot.to_delete is not None:
        parts.append(f"delete {snapshot.to_delete}")
    if snapshot.to_merge is not None:
        m = snapshot.to_merge
        parts.append(f"merge {m.parent_node} @ {m.key_idx}")
    if snapshot.target is not None:
        parts.append(f"target {snapshot.target}")
    return "  ·  ".join(parts)
