import pyomo.environ as pyo


def model_sets(model: pyo.AbstractModel) -> pyo.AbstractModel:
    model.slack_node = pyo.Set()
    model.N = pyo.Set()  # Bus indices.
    model.G = pyo.Set(within=model.N)  # Buses with a generator
    model.Arc = pyo.Set(dimen=2, within=model.N * model.N)  # type: ignore # (ancestor, bus)
    model.K = pyo.Set()  # Cone indices, one per non-root bus
    model.FACETS = pyo.Set()  # Facets of the polyhedral thermal limit

    model.Nes = pyo.Set(
        initialize=lambda m: [n for n in m.N if n not in m.slack_node]
    )  # Non-slack nodes
    model.NG = pyo.Set(
        initialize=lambda m: [n for n in m.N if n not in m.G]
    )  # Buses without generation
    model.Gnr = pyo.Set(
        initialize=lambda m: [n for n in m.G if n not in m.slack_node]
    )  # Non-slack generating buses
    return model
