"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest
import numpy as np
import polars as pl
import pyomo.environ as pyo
from data_model import FeederModel, SolverConfig


def first_available_solver(candidates: list[str]) -> str | None:
    """Name of the first installed solver among the candidates, None if there is none."""
    for name in candidates:
        try:
            if pyo.SolverFactory(name).available(exception_flag=False):
                return name
        except Exception:
            continue
    return None


def settings_dict(n_buses: int, **overrides) -> dict:
    settings = {
        "var_vec": [0.0] * n_buses,
        "Σ": np.zeros((n_buses, n_buses)),
        "z_g": 1.645,
        "z_v": 1.645,
        "toggle_volt_cc": False,
        "toggle_gen_cc": False,
        "toggle_thermal_cc": False,
        "thermal_const_method": 0,
        "vfac": 0.0,
        "qcfac": 1.0,
        "output_level": 0,
        "Ψ": 0.0,
    }
    settings.update(overrides)
    return settings


@pytest.fixture(scope="session")
def test_three_bus_feeder() -> FeederModel:
    """Substation 0 feeding bus 1 and leaf bus 2 in series, a cheap generator at the leaf."""
    return FeederModel(
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
                "quad_cost": [0.0, 0.0],
                "p_max_pu": [10.0, 1.0],
                "q_max_pu": [10.0, 0.0],
            }
        ),
    )


@pytest.fixture(scope="session")
def test_five_bus_feeder() -> FeederModel:
    """Branched feeder 0 -> 1 -> {2, 3}, 3 -> 4 with generators at 0, 2 and 4."""
    return FeederModel(
        node_data=pl.DataFrame(
            {
                "node_id": [0, 1, 2, 3, 4],
                "type": ["slack", "pq", "pq", "pq", "pq"],
                "p_cons_pu": [0.0, 0.3, 0.2, 0.3, 0.2],
                "q_cons_pu": [0.0, 0.1, 0.05, 0.1, 0.05],
                "min_vm_pu": [0.9] * 5,
                "max_vm_pu": [1.1] * 5,
            }
        ),
        edge_data=pl.DataFrame(
            {
                "edge_id": [0, 1, 2, 3],
                "u_of_edge": [0, 1, 1, 3],
                "v_of_edge": [1, 2, 3, 4],
                "r_pu": [0.02, 0.03, 0.02, 0.04],
                "x_pu": [0.04, 0.05, 0.04, 0.06],
                "s_max_pu": [2.0, 1.0, 1.0, 1.0],
            }
        ),
        generator_data=pl.DataFrame(
            {
                "node_id": [0, 2, 4],
                "cost": [10.0, 5.0, 6.0],
                "quad_cost": [1.0, 2.0, 3.0],
                "p_max_pu": [10.0, 0.5, 0.5],
                "q_max_pu": [10.0, 0.3, 0.3],
            }
        ),
    )


@pytest.fixture(scope="session")
def test_five_bus_cc_settings() -> dict:
    return settings_dict(
        5,
        Σ=np.diag([0.0, 1e-3, 2e-3, 1e-3, 2e-3]),
        toggle_volt_cc=True,
        toggle_gen_cc=True,
        toggle_thermal_cc=True,
        thermal_const_method=2,
        Ψ=1.0,
    )


@pytest.fixture(scope="session")
def test_lp_solver_config() -> SolverConfig | None:
    name = first_available_solver(["appsi_highs", "gurobi", "glpk", "cbc"])
    return None if name is None else SolverConfig(solver_name=name)


@pytest.fixture(scope="session")
def test_conic_solver_config() -> SolverConfig | None:
    name = first_available_solver(["gurobi", "gurobi_direct"])
    return None if name is None else SolverConfig(solver_name=name)
