import pytest
import numpy as np
import polars as pl

from helpers.networkx import generate_feeder_tree, generate_path_matrix
from helpers.linear_algebra import (
    NumericalPreconditionError,
    compute_sensitivity_matrices,
    psd_square_root,
)


class LinearAlgebraTestBase:
    @pytest.fixture(autouse=True)
    def setup_common_data(self, test_five_bus_feeder):
        self.feeder = test_five_bus_feeder
        self.tree = generate_feeder_tree(
            node_ids=[0, 1, 2, 3, 4],
            edge_data=self.feeder.edge_data,
            slack_node_id=0,
        )
        self.non_root_nodes = [1, 2, 3, 4]
        self.resistance = np.array([0.02, 0.03, 0.02, 0.04])


class TestFeederTree(LinearAlgebraTestBase):
    def test_edges_point_downstream(self):
        assert list(self.tree.predecessors(4)) == [3]
        assert sorted(self.tree.successors(1)) == [2, 3]
        assert self.tree.edges[3, 4]["r_pu"] == pytest.approx(0.04)

    def test_path_matrix(self):
        """Entry (l, i) flags the line feeding bus l on the path to bus i."""
        A = generate_path_matrix(self.tree, self.non_root_nodes)
        expected = np.array(
            [
                [1, 1, 1, 1],
                [0, 1, 0, 0],
                [0, 0, 1, 1],
                [0, 0, 0, 1],
            ]
        )
        np.testing.assert_array_equal(A, expected)

    def test_unknown_bus(self):
        edge_data = pl.DataFrame({"edge_id": [0], "u_of_edge": [0], "v_of_edge": [7]})
        with pytest.raises(ValueError, match="unknown bus"):
            generate_feeder_tree([0, 1], edge_data, 0)

    def test_meshed_grid(self):
        edge_data = pl.DataFrame(
            {"edge_id": [0, 1], "u_of_edge": [1, 2], "v_of_edge": [2, 1]}
        )
        with pytest.raises(ValueError, match="radial"):
            generate_feeder_tree([0, 1, 2], edge_data, 0)


class TestSensitivityMatrices(LinearAlgebraTestBase):
    def test_resistance_matrix(self):
        """R[i, j] sums the resistances shared by the paths to i and j."""
        A = generate_path_matrix(self.tree, self.non_root_nodes)
        sensitivity = compute_sensitivity_matrices(
            path_matrix=A,
            resistance=self.resistance,
            covariance=np.zeros((5, 5)),
            root_position=0,
            quad_cost=np.zeros(5),
        )
        assert sensitivity.R[0, 0] == pytest.approx(0.02)
        assert sensitivity.R[1, 1] == pytest.approx(0.05)
        assert sensitivity.R[3, 3] == pytest.approx(0.08)
        assert sensitivity.R[1, 3] == pytest.approx(0.02)
        assert sensitivity.R[2, 3] == pytest.approx(0.04)
        np.testing.assert_allclose(sensitivity.R_check @ sensitivity.R, np.eye(4), atol=1e-9)
        np.testing.assert_allclose(sensitivity.A_check @ A, np.eye(4), atol=1e-12)

    def test_covariance_root_and_spread(self):
        covariance = np.diag([5.0, 1e-2, 4e-2, 9e-2, 1.6e-1])
        sensitivity = compute_sensitivity_matrices(
            path_matrix=generate_path_matrix(self.tree, self.non_root_nodes),
            resistance=self.resistance,
            covariance=covariance,
            root_position=0,
            quad_cost=np.array([1.0, 0.0, 4.0, 0.0, 9.0]),
        )
        np.testing.assert_allclose(
            np.diag(sensitivity.Σ_rt), [0.1, 0.2, 0.3, 0.4], atol=1e-9
        )
        assert sensitivity.s == pytest.approx(np.sqrt(0.3))
        np.testing.assert_allclose(np.diag(sensitivity.F), [1.0, 0.0, 2.0, 0.0, 3.0])
        np.testing.assert_allclose(sensitivity.eΣ_rt, [0.1, 0.2, 0.3, 0.4], atol=1e-9)

    def test_zero_resistance(self):
        with pytest.raises(NumericalPreconditionError, match="positive definite"):
            compute_sensitivity_matrices(
                path_matrix=generate_path_matrix(self.tree, self.non_root_nodes),
                resistance=np.array([0.02, 0.0, 0.02, 0.04]),
                covariance=np.zeros((5, 5)),
                root_position=0,
                quad_cost=np.zeros(5),
            )

    def test_negative_quadratic_cost(self):
        with pytest.raises(NumericalPreconditionError, match="negative"):
            compute_sensitivity_matrices(
                path_matrix=generate_path_matrix(self.tree, self.non_root_nodes),
                resistance=self.resistance,
                covariance=np.zeros((5, 5)),
                root_position=0,
                quad_cost=np.array([1.0, -1.0, 0.0, 0.0, 0.0]),
            )


class TestSquareRoot:
    def test_square_root_of_dense_matrix(self):
        matrix = np.array([[2.0, 1.0], [1.0, 2.0]])
        root = psd_square_root(matrix, name="M")
        np.testing.assert_allclose(root @ root, matrix, atol=1e-12)
        np.testing.assert_allclose(root, root.T)

    def test_singular_matrix_is_accepted(self):
        root = psd_square_root(np.ones((3, 3)), name="M")
        np.testing.assert_allclose(root @ root, np.ones((3, 3)), atol=1e-9)

    def test_indefinite_matrix(self):
        with pytest.raises(NumericalPreconditionError, match="semi-definite"):
            psd_square_root(np.array([[1.0, 2.0], [2.0, 1.0]]), name="M")

    def test_asymmetric_matrix(self):
        with pytest.raises(NumericalPreconditionError, match="symmetric"):
            psd_square_root(np.array([[1.0, 0.5], [0.0, 1.0]]), name="M")
