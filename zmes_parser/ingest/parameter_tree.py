from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from zmes_parser.ingest.database import ZmesDatabase
from zmes_parser.ingest.errors import NoRootError, UnknownTypeError
from zmes_parser.models.parameters import ParameterType, TreeNode


_TREE_NODES_SQL = """
    SELECT
      Id              AS id,
      ParameterTypeId AS parameter_type_id,
      ParentNodeId    AS parent_id,
      SiblingIndex    AS sibling_index
    FROM RecordParameterTreeNodes
    WHERE RootParameterTypeId = ?
    ORDER BY SiblingIndex, Id
"""


def build_parameter_tree(
    db: ZmesDatabase,
    root_parameter_type_id: int,
    parameter_types: Mapping[int, ParameterType],
    *,
    strict_single_root: bool = True,
    warnings: Optional[List[str]] = None,
) -> TreeNode:
    """
    Build the schema tree of one record kind.

    Steps:
      1) load every RecordParameterTreeNodes row with the given RootParameterTypeId
      2) resolve each node's parameter type (UnknownTypeError if missing)
      3) link children to parents; nodes whose parent id does not resolve are
         reported in ``warnings`` and left out of the tree
      4) pick the root (parent_id NULL): NoRootError if none; with
         ``strict_single_root`` also NoRootError if more than one
      5) sort children by sibling index at every depth (ties by node id)
    """
    rows = db.select_all(_TREE_NODES_SQL, [int(root_parameter_type_id)])

    nodes: Dict[int, TreeNode] = {}
    for row in rows:
        node_id = int(row["id"])
        type_id = row["parameter_type_id"]
        pt = parameter_types.get(int(type_id)) if type_id is not None else None
        if pt is None:
            raise UnknownTypeError(f"Unknown parameter type id {type_id} for tree node {node_id}.")
        parent_id = row["parent_id"]
        nodes[node_id] = TreeNode(
            id=node_id,
            parameter_type=pt,
            parent_id=int(parent_id) if parent_id is not None else None,
            sibling_index=int(row["sibling_index"] or 0),
        )

    roots: List[TreeNode] = []
    for node in nodes.values():
        if node.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(node.parent_id)
        if parent is None:
            if warnings is not None:
                warnings.append(
                    f"tree node {node.id} ('{node.name}') references missing parent {node.parent_id}; dropped"
                )
            continue
        parent.children.append(node)

    if not roots:
        raise NoRootError(f"No root tree node found for RootParameterTypeId {root_parameter_type_id}.")
    if len(roots) > 1:
        ids = ", ".join(str(r.id) for r in roots)
        if strict_single_root:
            raise NoRootError(
                f"{len(roots)} root tree nodes found for RootParameterTypeId {root_parameter_type_id} (ids {ids})."
            )
        if warnings is not None:
            warnings.append(
                f"{len(roots)} root tree nodes for RootParameterTypeId {root_parameter_type_id} (ids {ids}); "
                f"using node {roots[0].id}"
            )

    root = roots[0]
    _sort_children(root)
    return root


def _sort_children(root: TreeNode) -> None:
    for node in root.iter_preorder():
        node.children.sort(key=lambda n: (n.sibling_index, n.id))


class ParameterTreeCache:
    """
    Builds each root-type tree once and hands the same (read-only) TreeNode to every
    record of that kind.

    Assumes all records sharing a RootParameterTypeId share one tree shape, which is
    how the store keys RecordParameterTreeNodes.
    """

    def __init__(
        self,
        db: ZmesDatabase,
        parameter_types: Mapping[int, ParameterType],
        *,
        strict_single_root: bool = True,
        enabled: bool = True,
        warnings: Optional[List[str]] = None,
    ):
        self._db = db
        self._types = parameter_types
        self._strict = bool(strict_single_root)
        self._enabled = bool(enabled)
        self._warnings = warnings
        self._trees: Dict[int, TreeNode] = {}
        self.n_built = 0

    def get(self, root_parameter_type_id: int) -> TreeNode:
        key = int(root_parameter_type_id)
        if self._enabled and key in self._trees:
            return self._trees[key]
        tree = build_parameter_tree(
            self._db,
            key,
            self._types,
            strict_single_root=self._strict,
            warnings=self._warnings,
        )
        self.n_built += 1
        if self._enabled:
            self._trees[key] = tree
        return tree
