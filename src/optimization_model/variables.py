import pyomo.environ as pyo

from optimization_model.schema import ModelSchema


def model_variables(model: pyo.AbstractModel, schema: ModelSchema) -> pyo.AbstractModel:
    # LinDistFlow variables
    model.v = pyo.Var(model.N, domain=pyo.NonNegativeReals)  # Voltage square
    model.fp = pyo.Var(model.N, domain=pyo.Reals)  # Active flow into the bus
    model.fq = pyo.Var(model.N, domain=pyo.Reals)  # Reactive flow into the bus
    model.gp = pyo.Var(model.N, domain=pyo.Reals)
    model.gq = pyo.Var(model.N, domain=pyo.Reals)
    model.r_sched = pyo.Var(domain=pyo.NonNegativeReals)  # Quadratic cost epigraph

    if schema.any_cc:
        model.α = pyo.Var(model.N, domain=pyo.NonNegativeReals)  # Participation factor
        model.r_bal = pyo.Var(domain=pyo.NonNegativeReals)  # Balancing cost epigraph
    if schema.volt_cc:
        model.ρ = pyo.Var(model.K, domain=pyo.Reals)
        model.t = pyo.Var(model.K, domain=pyo.NonNegativeReals)
        model.y_v = pyo.Var(model.K, model.K, domain=pyo.Reals)  # Cone coordinates
    if schema.thermal_cc:
        model.ρ_f = pyo.Var(model.K, domain=pyo.Reals)
        model.t_f = pyo.Var(model.K, domain=pyo.NonNegativeReals)
        model.y_f = pyo.Var(model.K, model.K, domain=pyo.Reals)  # Cone coordinates
    return model
