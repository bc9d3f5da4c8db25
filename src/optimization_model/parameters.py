import pyomo.environ as pyo


def model_parameters(model: pyo.AbstractModel) -> pyo.AbstractModel:
    # Nodal demand (pu)
    model.p_cons = pyo.Param(model.N, default=0.0)
    model.q_cons = pyo.Param(model.N, default=0.0)
    # Squared voltage limits, already replaced by the vfac band when it is active
    model.v_min_sq = pyo.Param(model.N)
    model.v_max_sq = pyo.Param(model.N)
    model.v_root = pyo.Param(default=1.0)
    # Lines, indexed by their downstream bus
    model.ancestor = pyo.Param(model.Nes, within=model.N)
    model.r = pyo.Param(model.Nes)  # Resistance (pu)
    model.x = pyo.Param(model.Nes)  # Reactance (pu)
    model.s_max = pyo.Param(model.Nes)  # Apparent power limit (pu)
    # Generators
    model.cost = pyo.Param(model.G, default=0.0)
    model.p_max = pyo.Param(model.G)
    model.q_max = pyo.Param(model.G)
    # Square root of the quadratic cost, without and with the slack node
    model.F = pyo.Param(model.N, default=0.0)
    model.F_schedule = pyo.Param(model.N, default=0.0)
    model.schedule_scale = pyo.Param(default=1.0)
    # Risk parameters
    model.z_g = pyo.Param()
    model.z_v = pyo.Param()
    model.s = pyo.Param()
    model.Ψ = pyo.Param(default=0.0)
    # Cone index <-> bus
    model.cone_bus = pyo.Param(model.K, within=model.Nes)
    model.cone_idx = pyo.Param(model.Nes, within=model.K)
    # Sensitivity matrices over cone indices
    model.R_check = pyo.Param(model.K, model.K, default=0.0)
    model.A_check = pyo.Param(model.K, model.K, default=0.0)
    model.RΣ_rt = pyo.Param(model.K, model.K, default=0.0)
    model.AΣ_rt = pyo.Param(model.K, model.K, default=0.0)
    model.eΣ_rt = pyo.Param(model.K, default=0.0)
    # Polyhedral approximation of the apparent power disk: a1*p + a2*q <= a3*s_max
    model.a1 = pyo.Param(model.FACETS)
    model.a2 = pyo.Param(model.FACETS)
    model.a3 = pyo.Param(model.FACETS)
    return model
