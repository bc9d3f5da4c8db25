from typing import Any, Mapping
import pyomo.environ as pyo
from pyomo.opt import SolverResults

from data_model import FeederModel, CCOPFSettings, SolverConfig
from pipeline_ccopf.data_manager import PipelineDataManager
from pipeline_ccopf.model_manager import PipelineModelManager
from pipeline_ccopf.result_manager import PipelineResultManager
from pipeline_ccopf.metadata import ModelMetadata


class CCOPF:
    """
    Top-level entrypoint of the chance-constrained OPF:
      1) validate the feeder tables and the radial topology
      2) derive the sensitivity matrices and the model parameters
      3) instantiate the conic model whose shape follows the active chance constraints
      4) optionally hand it over to the external solver and read the results
    """

    def __init__(
        self,
        settings: CCOPFSettings | Mapping[str, Any],
        solver_config: SolverConfig | None = None,
    ) -> None:
        if not isinstance(settings, CCOPFSettings):
            settings = CCOPFSettings.from_mapping(settings)
        self.settings: CCOPFSettings = settings
        self.data_manager = PipelineDataManager(settings=self.settings)
        self.model_manager = PipelineModelManager(
            solver_config or SolverConfig(), self.data_manager
        )
        self.result_manager = PipelineResultManager(
            data_manager=self.data_manager,
            model_manager=self.model_manager,
        )

    @property
    def model_instance(self) -> pyo.ConcreteModel:
        return self.model_manager.ccopf_model_instance

    @property
    def metadata(self) -> ModelMetadata:
        return self.data_manager.metadata

    def add_grid_data(self, grid_data: FeederModel) -> None:
        """
        Add feeder data and build the model instance.
        """
        self.data_manager.add_grid_data(grid_data)
        self.model_manager.instantaniate_model(
            self.data_manager.grid_data_parameters_dict
        )

    def solve_model(self) -> SolverResults:
        """
        Solve the optimization model.
        """
        return self.model_manager.solve_model()


def build_model(
    feeder: FeederModel, settings: CCOPFSettings | Mapping[str, Any]
) -> tuple[pyo.ConcreteModel, ModelMetadata]:
    """
    Build the chance-constrained OPF of a radial feeder.

    Args:
        feeder (FeederModel): Buses, lines and generators of the feeder.
        settings (CCOPFSettings | Mapping[str, Any]): Settings bundle.

    Returns:
        tuple[pyo.ConcreteModel, ModelMetadata]: The model, ready for a conic solver, and the
        metadata needed to interpret its solution.
    """
    ccopf = CCOPF(settings)
    ccopf.add_grid_data(feeder)
    return ccopf.model_instance, ccopf.metadata


__all__ = [
    "CCOPF",
    "build_model",
    "ModelMetadata",
    "PipelineDataManager",
    "PipelineModelManager",
    "PipelineResultManager",
]
