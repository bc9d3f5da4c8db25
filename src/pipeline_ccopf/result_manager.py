import numpy as np
import polars as pl
from polars import col as c
import pyomo.environ as pyo
from scipy.stats import norm

from helpers.pyomo_utility import extract_optimization_results, extract_dual_values
from pipeline_ccopf.data_manager import PipelineDataManager
from pipeline_ccopf.model_manager import PipelineModelManager


class PipelineResultManager:
    """
    Reads primal values, dual prices and chance-constraint satisfaction of a solved model,
    one row per bus.
    """

    def __init__(
        self,
        data_manager: PipelineDataManager,
        model_manager: PipelineModelManager,
    ):
        self.data_manager = data_manager
        self.model_manager = model_manager

    @property
    def model_instance(self) -> pyo.ConcreteModel:
        return self.model_manager.ccopf_model_instance

    def extract_node_voltage(self) -> pl.DataFrame:
        return extract_optimization_results(self.model_instance, "v").select(
            c("N").alias("node_id"), c("v").alias("v_sq"), c("v").sqrt().alias("v_pu")
        )

    def extract_line_flow(self) -> pl.DataFrame:
        return (
            extract_optimization_results(self.model_instance, "fp")
            .join(extract_optimization_results(self.model_instance, "fq"), on="N")
            .rename({"N": "v_of_edge", "fp": "p_flow_pu", "fq": "q_flow_pu"})
            .join(
                self.data_manager.edge_data.select(
                    c("edge_id", "u_of_edge", "v_of_edge").cast(pl.Int64), "s_max_pu"
                ),
                on="v_of_edge",
                how="inner",
            )
            .with_columns(
                (c("p_flow_pu") ** 2 + c("q_flow_pu") ** 2).sqrt().alias("s_flow_pu")
            )
            .with_columns((c("s_flow_pu") / c("s_max_pu")).alias("loading"))
            .sort("v_of_edge")
        )

    def extract_generation(self) -> pl.DataFrame:
        generation = extract_optimization_results(self.model_instance, "gp").join(
            extract_optimization_results(self.model_instance, "gq"), on="N"
        )
        if self.data_manager.schema.any_cc:
            generation = generation.join(
                extract_optimization_results(self.model_instance, "α"), on="N"
            )
        return generation.rename({"N": "node_id", "gp": "p_gen_pu", "gq": "q_gen_pu"}).sort(
            "node_id"
        )

    def extract_nodal_prices(self) -> pl.DataFrame:
        """Dual values of the active and reactive power balance."""
        return (
            extract_dual_values(self.model_instance, "active_power_balance")
            .join(
                extract_dual_values(self.model_instance, "reactive_power_balance"),
                on="N",
            )
            .rename(
                {
                    "N": "node_id",
                    "active_power_balance": "λ_p",
                    "reactive_power_balance": "λ_q",
                }
            )
            .sort("node_id")
        )

    def extract_voltage_chance_constraints(self) -> pl.DataFrame:
        """
        Probability that each non-root voltage stays below its upper and above its lower
        squared limit. The standard deviation of the squared voltage is 2t.
        """
        if not self.data_manager.schema.volt_cc:
            raise ValueError("Voltage chance constraints are not part of the model")
        metadata = self.data_manager.metadata
        v_limits = self.data_manager.grid_data_parameters_dict[None]  # type: ignore
        voltage = (
            extract_optimization_results(self.model_instance, "t")
            .with_columns(c("K").replace_strict(metadata.idx_to_bus).alias("node_id"))
            .join(self.extract_node_voltage(), on="node_id")
            .with_columns(
                c("node_id").replace_strict(v_limits["v_min_sq"]).alias("v_min_sq"),
                c("node_id").replace_strict(v_limits["v_max_sq"]).alias("v_max_sq"),
                (2 * c("t")).alias("σ_v_sq"),
            )
        )
        σ = voltage["σ_v_sq"].to_numpy()
        upper_margin = (voltage["v_max_sq"] - voltage["v_sq"]).to_numpy()
        lower_margin = (voltage["v_sq"] - voltage["v_min_sq"]).to_numpy()
        with np.errstate(divide="ignore", invalid="ignore"):
            p_upper = np.where(σ > 0, norm.cdf(upper_margin / σ), upper_margin >= 0)
            p_lower = np.where(σ > 0, norm.cdf(lower_margin / σ), lower_margin >= 0)
        return voltage.with_columns(
            pl.Series("p_upper", p_upper, dtype=pl.Float64),
            pl.Series("p_lower", p_lower, dtype=pl.Float64),
        ).select(
            "node_id", "v_sq", "v_min_sq", "v_max_sq", "t", "σ_v_sq", "p_upper", "p_lower"
        ).sort("node_id")

    def extract_objective(self) -> dict[str, float]:
        """Objective and its decomposition, the quadratic part recovered from the epigraph variables."""
        return {
            name: float(pyo.value(getattr(self.model_instance, name)))
            for name in ["linear_cost", "quad_cost", "variance_penalty", "objective"]
        }
