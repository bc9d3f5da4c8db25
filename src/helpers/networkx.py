import polars as pl
import numpy as np
import networkx as nx

from helpers.general import generate_log


# Global variable
log = generate_log(name=__name__)


def generate_feeder_tree(
    node_ids: list[int], edge_data: pl.DataFrame, slack_node_id: int
) -> nx.DiGraph:
    """
    Generate the directed feeder tree from edge data, each edge pointing from the
    ancestor bus (`u_of_edge`) to the downstream bus (`v_of_edge`).

    Args:
        node_ids (list[int]): Every bus of the feeder.
        edge_data (pl.DataFrame): The Polars DataFrame containing edge data.
        slack_node_id (int): The ID of the slack node.

    Returns:
        nx.DiGraph: The feeder tree with `edge_id`, `r_pu`, `x_pu` and `s_max_pu` as edge data.

    Raises:
        ValueError: If an edge references an unknown bus or if the grid is not a tree rooted at
        the slack node.

    Example:
    >>> import polars as pl
    >>> edge_data = pl.DataFrame({"edge_id": [0, 1], "u_of_edge": [0, 1], "v_of_edge": [1, 2]})
    >>> tree = generate_feeder_tree([0, 1, 2], edge_data, 0)
    >>> list(tree.edges)
    [(0, 1), (1, 2)]
    """
    nx_grid: nx.DiGraph = nx.DiGraph()
    nx_grid.add_nodes_from(node_ids)
    for edge in edge_data.iter_rows(named=True):
        u, v = edge.pop("u_of_edge"), edge.pop("v_of_edge")
        if u not in nx_grid or v not in nx_grid:
            raise ValueError(f"Edge {edge.get('edge_id')} references an unknown bus")
        nx_grid.add_edge(u, v, **edge)

    if not nx.is_arborescence(nx_grid):
        raise ValueError("The grid is not a radial tree")
    if nx_grid.in_degree(slack_node_id) != 0:
        raise ValueError("The slack node is not the root of the grid")

    return nx_grid


def generate_path_matrix(tree: nx.DiGraph, non_root_nodes: list[int]) -> np.ndarray:
    """
    Ancestry matrix of the feeder: entry (l, i) is 1 when the line feeding bus `l` lies on
    the path from the root to bus `i`. Lines are identified by their downstream bus, hence
    the matrix is square over the non-root buses.
    """
    index = {node_id: k for k, node_id in enumerate(non_root_nodes)}
    path_matrix = np.zeros((len(non_root_nodes), len(non_root_nodes)))
    for node_id in non_root_nodes:
        upstream = (nx.ancestors(tree, node_id) | {node_id}) & index.keys()
        for line_node_id in upstream:
            path_matrix[index[line_node_id], index[node_id]] = 1.0
    return path_matrix
