import pyomo.environ as pyo
from pyomo.opt import SolverResults

from data_model import SolverConfig
from helpers import generate_log
from optimization_model import generate_ccopf_model
from pipeline_ccopf.data_manager import PipelineDataManager

log = generate_log(name=__name__)


class PipelineModelManager:
    def __init__(
        self,
        config: SolverConfig,
        data_manager: PipelineDataManager,
    ) -> None:

        self.config = config
        self.data_manager = data_manager

        self.ccopf_model: pyo.AbstractModel
        self.ccopf_model_instance: pyo.ConcreteModel

        self.solver = pyo.SolverFactory(config.solver_name)
        if config.solver_name.startswith("gurobi"):
            if config.threads is not None:
                self.solver.options["Threads"] = config.threads
            self.solver.options["TimeLimit"] = config.time_limit
            self.solver.options["OptimalityTol"] = config.optimality_tolerance
            self.solver.options["FeasibilityTol"] = config.feasibility_tolerance
            if config.solver_qcp_dual is not None:
                self.solver.options["QCPDual"] = config.solver_qcp_dual

    def instantaniate_model(self, grid_data_parameters_dict: dict | None) -> None:
        if grid_data_parameters_dict is None:
            raise ValueError("Grid data must be added before the model is built")
        self.ccopf_model = generate_ccopf_model(self.data_manager.schema)
        self.ccopf_model_instance = self.ccopf_model.create_instance(grid_data_parameters_dict)  # type: ignore

        n_variables = len(list(self.ccopf_model_instance.component_data_objects(pyo.Var)))
        n_constraints = len(
            list(self.ccopf_model_instance.component_data_objects(pyo.Constraint))
        )
        log.info(
            f"Chance-constrained OPF built: {n_variables} variables, {n_constraints} constraints"
        )

    def solve_model(self) -> SolverResults:
        """Hand the model over to the external conic solver."""
        results = self.solver.solve(
            self.ccopf_model_instance,
            tee=self.data_manager.settings.output_level > 0,
        )
        if results.solver.termination_condition != pyo.TerminationCondition.optimal:
            log.error(f"Solve failed: {results.solver.termination_condition}")
            return results
        current_obj = pyo.value(self.ccopf_model_instance.objective)
        log.info(f"Chance-constrained OPF solve successful: objective = {current_obj:.4f}")
        return results
