from optimization_model.constraints import *
from optimization_model.chance_constraints import *
from optimization_model.objective import *
from optimization_model.schema import ModelSchema
from data_model import ThermalConstMethod
import pyomo.environ as pyo


def distflow_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    # 1) Power balance at every bus
    model.active_power_balance = pyo.Constraint(model.N, rule=active_power_balance_rule)
    model.reactive_power_balance = pyo.Constraint(
        model.N, rule=reactive_power_balance_rule
    )
    # 2) LinDistFlow voltage drop
    model.voltage_drop = pyo.Constraint(model.Nes, rule=voltage_drop_rule)
    # 3) Substation
    model.slack_voltage = pyo.Constraint(model.slack_node, rule=slack_voltage_rule)
    model.slack_active_flow = pyo.Constraint(
        model.slack_node, rule=slack_active_flow_rule
    )
    model.slack_reactive_flow = pyo.Constraint(
        model.slack_node, rule=slack_reactive_flow_rule
    )
    # 4) Buses without generator
    model.no_active_generation = pyo.Constraint(
        model.NG, rule=no_active_generation_rule
    )
    model.no_reactive_generation = pyo.Constraint(
        model.NG, rule=no_reactive_generation_rule
    )
    # 5) Reactive generation limits
    model.reactive_generation_upper_limit = pyo.Constraint(
        model.G, rule=reactive_generation_upper_limit_rule
    )
    model.reactive_generation_lower_limit = pyo.Constraint(
        model.G, rule=reactive_generation_lower_limit_rule
    )
    return model


def participation_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.participation_balance = pyo.Constraint(rule=participation_balance_rule)
    model.no_participation = pyo.Constraint(model.NG, rule=no_participation_rule)
    return model


def voltage_limit_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.voltage_upper_limit = pyo.Constraint(
        model.Nes, rule=voltage_upper_limit_rule
    )
    model.voltage_lower_limit = pyo.Constraint(
        model.Nes, rule=voltage_lower_limit_rule
    )
    return model


def voltage_cc_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.voltage_cc_cone_coordinate = pyo.Constraint(
        model.K, model.K, rule=voltage_cc_cone_coordinate_rule
    )
    model.voltage_cc_cone = pyo.Constraint(model.K, rule=voltage_cc_cone_rule)
    model.voltage_cc_participation = pyo.Constraint(
        model.K, rule=voltage_cc_participation_rule
    )
    model.voltage_upper_limit = pyo.Constraint(
        model.Nes, rule=voltage_cc_upper_limit_rule
    )
    model.voltage_lower_limit = pyo.Constraint(
        model.Nes, rule=voltage_cc_lower_limit_rule
    )
    return model


def generation_limit_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.active_generation_upper_limit = pyo.Constraint(
        model.Gnr, rule=active_generation_upper_limit_rule
    )
    model.active_generation_lower_limit = pyo.Constraint(
        model.Gnr, rule=active_generation_lower_limit_rule
    )
    return model


def generation_cc_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.active_generation_upper_limit = pyo.Constraint(
        model.Gnr, rule=active_generation_cc_upper_limit_rule
    )
    model.active_generation_lower_limit = pyo.Constraint(
        model.Gnr, rule=active_generation_cc_lower_limit_rule
    )
    return model


def thermal_limit_constraints(
    model: pyo.AbstractModel, thermal_method: ThermalConstMethod
) -> pyo.AbstractModel:
    if thermal_method == ThermalConstMethod.EXACT_SOC:
        model.thermal_limit = pyo.Constraint(model.Nes, rule=thermal_limit_cone_rule)
    elif thermal_method == ThermalConstMethod.POLYHEDRAL:
        model.thermal_limit = pyo.Constraint(
            model.Nes, model.FACETS, rule=thermal_limit_facet_rule
        )
    return model


def thermal_cc_constraints(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.thermal_cc_cone_coordinate = pyo.Constraint(
        model.K, model.K, rule=thermal_cc_cone_coordinate_rule
    )
    model.thermal_cc_cone = pyo.Constraint(model.K, rule=thermal_cc_cone_rule)
    model.thermal_cc_participation = pyo.Constraint(
        model.K, rule=thermal_cc_participation_rule
    )
    model.thermal_upper_limit = pyo.Constraint(
        model.Nes, model.FACETS, rule=thermal_cc_upper_facet_rule
    )
    model.thermal_lower_limit = pyo.Constraint(
        model.Nes, model.FACETS, rule=thermal_cc_lower_facet_rule
    )
    return model


def objective_constraints(
    model: pyo.AbstractModel, schema: ModelSchema
) -> pyo.AbstractModel:
    model.linear_cost = pyo.Expression(rule=linear_cost_rule)
    model.schedule_cost_cone = pyo.Constraint(rule=schedule_cost_cone_rule)
    if schema.any_cc:
        model.balancing_cost_cone = pyo.Constraint(rule=balancing_cost_cone_rule)
        model.quad_cost = pyo.Expression(rule=balancing_quad_cost_rule)
    else:
        model.quad_cost = pyo.Expression(rule=schedule_quad_cost_rule)
    if schema.volt_cc:
        model.variance_penalty = pyo.Expression(rule=variance_penalty_rule)
    else:
        model.variance_penalty = pyo.Expression(rule=no_variance_penalty_rule)

    model.objective = pyo.Objective(rule=objective_rule, sense=pyo.minimize)
    return model
