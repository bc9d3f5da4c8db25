import pyomo.environ as pyo

##### LINDISTFLOW CONSTRAINTS #####


# (1) Power balance: flow into the bus plus local generation minus the flows towards the
# children equals the local demand.
def active_power_balance_rule(m, n):
    children_flow = sum(m.fp[j] for (i, j) in m.Arc if i == n)
    return m.fp[n] + m.gp[n] - children_flow == m.p_cons[n]


def reactive_power_balance_rule(m, n):
    children_flow = sum(m.fq[j] for (i, j) in m.Arc if i == n)
    return m.fq[n] + m.gq[n] - children_flow == m.q_cons[n]


# (2) Voltage drop along the line feeding bus n, losses neglected.
def voltage_drop_rule(m, n):
    return m.v[n] == m.v[m.ancestor[n]] - 2 * (m.r[n] * m.fp[n] + m.x[n] * m.fq[n])


# (3) Substation: voltage reference and no incoming line.
def slack_voltage_rule(m, n):
    return m.v[n] == m.v_root


def slack_active_flow_rule(m, n):
    return m.fp[n] == 0


def slack_reactive_flow_rule(m, n):
    return m.fq[n] == 0


# (4) Buses without generator.
def no_active_generation_rule(m, n):
    return m.gp[n] == 0


def no_reactive_generation_rule(m, n):
    return m.gq[n] == 0


# (5) Deterministic voltage limits.
def voltage_upper_limit_rule(m, n):
    return m.v[n] <= m.v_max_sq[n]


def voltage_lower_limit_rule(m, n):
    return m.v[n] >= m.v_min_sq[n]


# (6) Generation limits.
def active_generation_upper_limit_rule(m, n):
    return m.gp[n] <= m.p_max[n]


def active_generation_lower_limit_rule(m, n):
    return m.gp[n] >= 0


def reactive_generation_upper_limit_rule(m, n):
    return m.gq[n] <= m.q_max[n]


def reactive_generation_lower_limit_rule(m, n):
    return m.gq[n] >= -m.q_max[n]


# (7) Deterministic thermal limits.
def thermal_limit_cone_rule(m, n):
    return m.fp[n] ** 2 + m.fq[n] ** 2 <= m.s_max[n] ** 2


def thermal_limit_facet_rule(m, n, c):
    return m.a1[c] * m.fp[n] + m.a2[c] * m.fq[n] <= m.a3[c] * m.s_max[n]
