import pyomo.environ as pyo

# The quadratic cost is written as a second-order cone over the epigraph variables
# r_sched and r_bal so that the objective stays linear: conic solvers do not accept a
# quadratic objective together with cone constraints. The slack node has no schedule
# cost, its quadratic coefficient prices the participation factors instead.


def linear_cost_rule(m):
    return sum(m.cost[n] * m.gp[n] for n in m.G)


def schedule_cost_cone_rule(m):
    scale = pyo.value(m.schedule_scale)
    coefficients = {n: scale * m.F_schedule[n] for n in m.N}
    if all(coefficient == 0 for coefficient in coefficients.values()):
        return pyo.Constraint.Skip
    return (
        sum((coefficients[n] * m.gp[n]) ** 2 for n in m.N if coefficients[n] != 0)
        <= m.r_sched**2
    )


def balancing_cost_cone_rule(m):
    if all(m.F[n] == 0 for n in m.N):
        return pyo.Constraint.Skip
    return sum((m.F[n] * m.α[n]) ** 2 for n in m.N if m.F[n] != 0) <= m.r_bal**2


def schedule_quad_cost_rule(m):
    return m.r_sched


def balancing_quad_cost_rule(m):
    return m.r_sched + m.r_bal


def variance_penalty_rule(m):
    return m.Ψ * sum(m.t[k] for k in m.K)


def no_variance_penalty_rule(m):
    return 0.0


def objective_rule(m):
    return m.linear_cost + m.quad_cost + m.variance_penalty
