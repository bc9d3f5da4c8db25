# %%
import numpy as np
import polars as pl

from data_model import FeederModel, CCOPFSettings, SolverConfig
from pipeline_ccopf import CCOPF

# %% Three-bus feeder: substation 0, bus 1 and a leaf bus 2 with a cheap generator
grid_data = FeederModel(
    node_data=pl.DataFrame(
        {
            "node_id": [0, 1, 2],
            "type": ["slack", "pq", "pq"],
            "p_cons_pu": [0.0, 0.5, 0.5],
            "q_cons_pu": [0.0, 0.2, 0.2],
        }
    ),
    edge_data=pl.DataFrame(
        {
            "edge_id": [0, 1],
            "u_of_edge": [0, 1],
            "v_of_edge": [1, 2],
            "r_pu": [0.01, 0.01],
            "x_pu": [0.05, 0.05],
            "s_max_pu": [5.0, 5.0],
        }
    ),
    generator_data=pl.DataFrame(
        {
            "node_id": [0, 2],
            "cost": [100.0, 1.0],
            "quad_cost": [0.1, 0.5],
            "p_max_pu": [10.0, 1.0],
            "q_max_pu": [10.0, 0.5],
        }
    ),
)

# %% Configure the chance constraints
settings = CCOPFSettings(
    var_vec=[0.0, 1.0, 1.0],
    Σ=np.diag([0.0, 1e-3, 2e-3]),
    z_g=1.645,
    z_v=1.645,
    toggle_volt_cc=True,
    toggle_gen_cc=True,
    toggle_thermal_cc=False,
    thermal_const_method=2,
    vfac=0.05,
    qcfac=1.0,
    output_level=1,
    Ψ=1.0,
)

ccopf = CCOPF(settings=settings, solver_config=SolverConfig(solver_name="gurobi"))
ccopf.add_grid_data(grid_data)

# %% Solve
ccopf.solve_model()
# %% Results
print(ccopf.result_manager.extract_generation())
print(ccopf.result_manager.extract_voltage_chance_constraints())
print(ccopf.result_manager.extract_objective())
