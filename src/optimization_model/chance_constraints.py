"""
Second-order cone reformulation of the Gaussian chance constraints.

Net injections deviate from their forecast by ω ~ N(0, Σ) and the deviation is balanced by
the generators in proportion to their participation factor α. Voltage and line flow
deviations are then affine in ω, so P[x + a'ω <= b] >= Φ(z) holds iff x + z‖Σ^{1/2}a‖ <= b.
Each ‖Σ^{1/2}a‖ is bounded by an epigraph variable t whose cone coordinates y are defined
by linear equalities.
"""

# Facets of a regular dodecagon inscribed in the unit circle, see "Distributed Generation
# Hosting Capacity Evaluation for Distribution Systems Considering the Robust Optimal
# Operation of OLTC and SVC".
FACET_A1: list[float] = [1, 1, 0.2679, -0.2679, -1, -1, -1, -1, -0.2679, 0.2679, 1, 1]
FACET_A2: list[float] = [0.2679, 1, 1, 1, 1, 0.2679, -0.2679, -1, -1, -1, -1, -0.2679]
FACET_A3: list[float] = [1, 1.366, 1, 1, 1.366, 1, 1, 1.366, 1, 1, 1.366, 1]


#### PARTICIPATION FACTORS ####


def participation_balance_rule(m):
    return sum(m.α[n] for n in m.N) == 1


def no_participation_rule(m, n):
    return m.α[n] == 0


#### VOLTAGE ####


def voltage_cc_cone_coordinate_rule(m, k, u):
    return m.y_v[k, u] == m.RΣ_rt[k, u] + m.ρ[k] * m.eΣ_rt[u]


def voltage_cc_cone_rule(m, k):
    return sum(m.y_v[k, u] ** 2 for u in m.K) <= m.t[k] ** 2


def voltage_cc_participation_rule(m, k):
    return sum(m.R_check[k, kk] * m.ρ[kk] for kk in m.K) == m.α[m.cone_bus[k]]


def voltage_cc_upper_limit_rule(m, n):
    return m.v[n] + 2 * m.z_v * m.t[m.cone_idx[n]] <= m.v_max_sq[n]


def voltage_cc_lower_limit_rule(m, n):
    return -m.v[n] + 2 * m.z_v * m.t[m.cone_idx[n]] <= -m.v_min_sq[n]


#### GENERATION ####


def active_generation_cc_upper_limit_rule(m, n):
    return m.gp[n] + m.α[n] * m.z_g * m.s <= m.p_max[n]


def active_generation_cc_lower_limit_rule(m, n):
    return m.gp[n] - m.α[n] * m.z_g * m.s >= 0


#### THERMAL LIMITS ####


def thermal_cc_cone_coordinate_rule(m, k, u):
    return m.y_f[k, u] == m.AΣ_rt[k, u] + m.ρ_f[k] * m.eΣ_rt[u]


def thermal_cc_cone_rule(m, k):
    return sum(m.y_f[k, u] ** 2 for u in m.K) <= m.t_f[k] ** 2


def thermal_cc_participation_rule(m, k):
    return sum(m.A_check[k, kk] * m.ρ_f[kk] for kk in m.K) == m.α[m.cone_bus[k]]


def thermal_cc_upper_facet_rule(m, n, c):
    margin = m.t_f[m.cone_idx[n]]
    return m.a1[c] * (m.fp[n] + margin) + m.a2[c] * m.fq[n] <= m.a3[c] * m.s_max[n]


def thermal_cc_lower_facet_rule(m, n, c):
    margin = m.t_f[m.cone_idx[n]]
    return m.a1[c] * (m.fp[n] - margin) + m.a2[c] * m.fq[n] <= m.a3[c] * m.s_max[n]
