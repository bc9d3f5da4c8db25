import numpy as np
import networkx as nx
import patito as pt
import polars as pl
from polars import col as c

from data_model import (
    CCOPFSettings,
    FeederModel,
    NodeData,
    EdgeData,
    GeneratorData,
)
from helpers import generate_log, pl_to_dict
from helpers.linear_algebra import SensitivityMatrices, compute_sensitivity_matrices
from helpers.networkx import generate_feeder_tree, generate_path_matrix
from optimization_model import ModelSchema, FACET_A1, FACET_A2, FACET_A3
from pipeline_ccopf.metadata import ModelMetadata

log = generate_log(name=__name__)


def validate_table(table: pl.DataFrame, model: type[pt.Model]) -> pt.DataFrame:
    """Cast a table to the patito model, filling missing columns with their defaults"""
    old_table: pl.DataFrame = model.DataFrame(schema=model.columns).cast().clear()
    col_list: list[str] = list(set(table.columns).intersection(set(old_table.columns)))
    new_table_pl: pl.DataFrame = pl.concat(
        [old_table, table.select(col_list)], how="diagonal_relaxed"
    )
    new_table_pt: pt.DataFrame = (
        pt.DataFrame(new_table_pl)
        .set_model(model)
        .fill_null(strategy="defaults")
        .cast(strict=True)
    )
    new_table_pt.validate()
    return new_table_pt


def matrix_to_dict(matrix: np.ndarray) -> dict:
    return {
        (k, u): float(matrix[k, u])
        for k in range(matrix.shape[0])
        for u in range(matrix.shape[1])
    }


class PipelineDataManager:
    """Manages feeder data validation and the preprocessing of the model parameters"""

    def __init__(self, settings: CCOPFSettings):
        self.settings: CCOPFSettings = settings
        self.schema: ModelSchema = ModelSchema.from_settings(settings)

        # patito tables for static schemas
        self.__node_data: pt.DataFrame[NodeData] = NodeData.DataFrame(
            schema=NodeData.columns
        ).cast()
        self.__edge_data: pt.DataFrame[EdgeData] = EdgeData.DataFrame(
            schema=EdgeData.columns
        ).cast()
        self.__generator_data: pt.DataFrame[GeneratorData] = GeneratorData.DataFrame(
            schema=GeneratorData.columns
        ).cast()
        self.__slack_node: int
        self.__tree: nx.DiGraph

        self.bus_order: list[int] = []
        self.idx_to_bus: dict[int, int] = {}
        self.bus_to_idx: dict[int, int] = {}
        self.sensitivity: SensitivityMatrices
        # final data dict for Pyomo
        self.grid_data_parameters_dict: dict | None = None

    @property
    def node_data(self) -> pt.DataFrame[NodeData]:
        return self.__node_data

    @property
    def edge_data(self) -> pt.DataFrame[EdgeData]:
        return self.__edge_data

    @property
    def generator_data(self) -> pt.DataFrame[GeneratorData]:
        return self.__generator_data

    @property
    def slack_node(self) -> int:
        return self.__slack_node

    @property
    def tree(self) -> nx.DiGraph:
        return self.__tree

    @property
    def metadata(self) -> ModelMetadata:
        return ModelMetadata(
            idx_to_bus=dict(self.idx_to_bus),
            bus_to_idx=dict(self.bus_to_idx),
            toggle_volt_cc=self.settings.toggle_volt_cc,
            toggle_gen_cc=self.settings.toggle_gen_cc,
            toggle_thermal_cc=self.settings.toggle_thermal_cc,
            thermal_const_method=self.settings.thermal_const_method,
            any_cc=self.schema.any_cc,
            z_v=self.settings.z_v,
            z_g=self.settings.z_g,
            s=self.sensitivity.s,
            Σ=self.settings.covariance,
        )

    def add_grid_data(self, grid_data: FeederModel) -> None:
        """Add and validate feeder data"""
        # 1) static tables
        self.__node_data = validate_table(grid_data.node_data, NodeData)
        self.__edge_data = validate_table(grid_data.edge_data, EdgeData)
        self.__generator_data = validate_table(grid_data.generator_data, GeneratorData)
        self.__validate_slack_node()
        self.__validate_tree()
        # 2) load scaling
        if self.settings.loadfac is not None:
            self.__scale_load(self.settings.loadfac)
        # 3) linear algebra, fails before any model component is built
        self.__compute_sensitivity()
        # 4) now build the full parameters dict
        self.__instantiate_grid_data()

    def __validate_slack_node(self):
        """Validate there's exactly one slack node"""
        if self.node_data.filter(c("type") == "slack").height != 1:
            raise ValueError("There must be only one slack node")

        self.__slack_node = self.node_data.filter(c("type") == "slack")["node_id"][0]

    def __validate_tree(self):
        self.bus_order = sorted(self.node_data["node_id"].to_list())
        self.__tree = generate_feeder_tree(
            node_ids=self.bus_order,
            edge_data=self.edge_data,
            slack_node_id=self.__slack_node,
        )
        non_root_nodes = [n for n in self.bus_order if n != self.__slack_node]
        self.idx_to_bus = dict(enumerate(non_root_nodes))
        self.bus_to_idx = {n: k for k, n in self.idx_to_bus.items()}

    def __scale_load(self, loadfac: float):
        """Scale every demand by the same factor, keeping its power factor"""
        self.__node_data = self.__node_data.with_columns(
            c("p_cons_pu") * loadfac, c("q_cons_pu") * loadfac
        )

    def __compute_sensitivity(self):
        covariance = self.settings.covariance
        n_buses = len(self.bus_order)
        if covariance.shape != (n_buses, n_buses):
            raise ValueError(
                f"Covariance matrix Σ has shape {covariance.shape}, expected ({n_buses}, {n_buses})"
            )
        non_root_nodes = list(self.idx_to_bus.values())
        resistance = pl_to_dict(self.edge_data["v_of_edge", "r_pu"])
        quad_cost = pl_to_dict(self.generator_data["node_id", "quad_cost"])

        self.sensitivity = compute_sensitivity_matrices(
            path_matrix=generate_path_matrix(self.__tree, non_root_nodes),
            resistance=np.array([resistance[n] for n in non_root_nodes]),
            covariance=covariance,
            root_position=self.bus_order.index(self.__slack_node),
            quad_cost=np.array(
                [quad_cost.get(n, 0.0) * self.settings.qcfac for n in self.bus_order]
            ),
        )

    def __voltage_limits(self) -> tuple[dict, dict]:
        vfac = self.settings.vfac
        if vfac > 0:
            return (
                {n: (1 - vfac) ** 2 for n in self.bus_order},
                {n: (1 + vfac) ** 2 for n in self.bus_order},
            )
        return (
            pl_to_dict(self.node_data.select("node_id", c("min_vm_pu") ** 2)),
            pl_to_dict(self.node_data.select("node_id", c("max_vm_pu") ** 2)),
        )

    def __instantiate_grid_data(self):
        """
        Build a Pyomo data dict that includes:
          - sets N, G, Arc, K, FACETS and the slack node
          - nodal demand and squared voltage limits
          - line and generator parameters
          - risk parameters and the sensitivity matrices over cone indices
        """
        sensitivity = self.sensitivity
        F = np.diag(sensitivity.F)
        F_schedule = {
            n: 0.0 if n == self.__slack_node else float(F[i])
            for i, n in enumerate(self.bus_order)
        }
        v_min_sq, v_max_sq = self.__voltage_limits()

        self.grid_data_parameters_dict = {
            None: {
                # sets
                "N": {None: self.bus_order},
                "slack_node": {None: [self.__slack_node]},
                "G": {None: sorted(self.generator_data["node_id"].to_list())},
                "Arc": {None: self.edge_data.select("u_of_edge", "v_of_edge").rows()},
                "K": {None: list(self.idx_to_bus.keys())},
                "FACETS": {None: list(range(len(FACET_A1)))},
                # nodal parameters
                "p_cons": pl_to_dict(self.node_data["node_id", "p_cons_pu"]),
                "q_cons": pl_to_dict(self.node_data["node_id", "q_cons_pu"]),
                "v_min_sq": v_min_sq,
                "v_max_sq": v_max_sq,
                "v_root": {None: 1.0},
                # line parameters, keyed by downstream bus
                "ancestor": pl_to_dict(self.edge_data["v_of_edge", "u_of_edge"]),
                "r": pl_to_dict(self.edge_data["v_of_edge", "r_pu"]),
                "x": pl_to_dict(self.edge_data["v_of_edge", "x_pu"]),
                "s_max": pl_to_dict(self.edge_data["v_of_edge", "s_max_pu"]),
                # generator parameters
                "cost": pl_to_dict(self.generator_data["node_id", "cost"]),
                "p_max": pl_to_dict(self.generator_data["node_id", "p_max_pu"]),
                "q_max": pl_to_dict(self.generator_data["node_id", "q_max_pu"]),
                # cost
                "F": {n: float(F[i]) for i, n in enumerate(self.bus_order)},
                "F_schedule": F_schedule,
                "schedule_scale": {
                    None: 1.0 if self.schema.any_cc else sensitivity.s
                },
                # risk
                "z_g": {None: self.settings.z_g},
                "z_v": {None: self.settings.z_v},
                "s": {None: sensitivity.s},
                "Ψ": {None: self.settings.Ψ},
                # cone index mapping
                "cone_bus": dict(self.idx_to_bus),
                "cone_idx": dict(self.bus_to_idx),
                # sensitivity matrices
                "R_check": matrix_to_dict(sensitivity.R_check),
                "A_check": matrix_to_dict(sensitivity.A_check),
                "RΣ_rt": matrix_to_dict(sensitivity.RΣ_rt),
                "AΣ_rt": matrix_to_dict(sensitivity.AΣ_rt),
                "eΣ_rt": dict(enumerate(map(float, sensitivity.eΣ_rt))),
                # polyhedral thermal limit
                "a1": dict(enumerate(FACET_A1)),
                "a2": dict(enumerate(FACET_A2)),
                "a3": dict(enumerate(FACET_A3)),
            }
        }
