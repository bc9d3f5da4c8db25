import polars as pl
import pyomo.environ as pyo


def _index_names(component: pyo.Component) -> list[str]:
    names: list[str] = list(map(lambda x: x.name, component.index_set().subsets()))  # type: ignore
    return [f"{name}_{k}" if names.count(name) > 1 else name for k, name in enumerate(names)]


def _as_tuple(index) -> tuple:
    return index if isinstance(index, tuple) else (index,)


def extract_optimization_results(model_instance: pyo.Model, var_name: str) -> pl.DataFrame:
    """
    Extract the values of an indexed variable, one column per index set.
    """
    component = getattr(model_instance, var_name)
    rows = [
        (*_as_tuple(index), value) for index, value in component.extract_values().items()
    ]
    return pl.DataFrame(
        rows, schema=_index_names(component) + [var_name], orient="row"
    ).with_columns(pl.col(var_name).cast(pl.Float64))


def extract_dual_values(model_instance: pyo.Model, constraint_name: str) -> pl.DataFrame:
    """
    Extract the dual values of an indexed constraint from the `dual` suffix. Missing duals
    (unsolved model or solver without dual information) are returned as null.
    """
    component = getattr(model_instance, constraint_name)
    rows = [
        (*_as_tuple(index), model_instance.dual.get(constraint))  # type: ignore
        for index, constraint in component.items()
    ]
    return pl.DataFrame(
        rows, schema=_index_names(component) + [constraint_name], orient="row"
    ).with_columns(pl.col(constraint_name).cast(pl.Float64))
