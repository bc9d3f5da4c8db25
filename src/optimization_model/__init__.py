from pyomo import environ as pyo
from pyomo.environ import Suffix

from optimization_model.schema import ModelSchema
from optimization_model.sets import model_sets
from optimization_model.parameters import model_parameters
from optimization_model.variables import model_variables
from optimization_model.ccopf_model import (
    distflow_constraints,
    participation_constraints,
    voltage_limit_constraints,
    voltage_cc_constraints,
    generation_limit_constraints,
    generation_cc_constraints,
    thermal_limit_constraints,
    thermal_cc_constraints,
    objective_constraints,
)
from optimization_model.chance_constraints import FACET_A1, FACET_A2, FACET_A3


def generate_ccopf_model(schema: ModelSchema) -> pyo.AbstractModel:
    """Builds the chance-constrained LinDistFlow model whose shape is given by the schema."""
    ccopf_model: pyo.AbstractModel = pyo.AbstractModel()  # type: ignore
    ccopf_model = model_sets(ccopf_model)
    ccopf_model = model_parameters(ccopf_model)
    ccopf_model = model_variables(ccopf_model, schema)
    ccopf_model = distflow_constraints(ccopf_model)
    if schema.any_cc:
        ccopf_model = participation_constraints(ccopf_model)
    if schema.volt_cc:
        ccopf_model = voltage_cc_constraints(ccopf_model)
    else:
        ccopf_model = voltage_limit_constraints(ccopf_model)
    if schema.gen_cc:
        ccopf_model = generation_cc_constraints(ccopf_model)
    else:
        ccopf_model = generation_limit_constraints(ccopf_model)
    if schema.thermal_cc:
        ccopf_model = thermal_cc_constraints(ccopf_model)
    else:
        ccopf_model = thermal_limit_constraints(ccopf_model, schema.thermal_method)
    ccopf_model = objective_constraints(ccopf_model, schema)
    ccopf_model.dual = Suffix(direction=Suffix.IMPORT)
    return ccopf_model


__all__ = [
    "ModelSchema",
    "generate_ccopf_model",
    "FACET_A1",
    "FACET_A2",
    "FACET_A3",
]
