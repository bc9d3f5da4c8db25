from dataclasses import dataclass, field
from typing_extensions import Literal
import polars as pl
import patito as pt

NODE_TYPES = Literal["slack", "pq"]


def literal_constraint(field: pl.Expr, values) -> pl.Expr:
    return field.is_in(list(values.__args__)).alias("literal_constraint")


class NodeData(pt.Model):
    node_id: int = pt.Field(dtype=pl.Int32, unique=True)
    p_cons_pu: float = pt.Field(dtype=pl.Float64, default=0.0)
    q_cons_pu: float = pt.Field(dtype=pl.Float64, default=0.0)
    min_vm_pu: float = pt.Field(dtype=pl.Float64, default=0.9)
    max_vm_pu: float = pt.Field(dtype=pl.Float64, default=1.1)
    type: NODE_TYPES = pt.Field(
        dtype=pl.Utf8, constraints=literal_constraint(pt.field, NODE_TYPES)
    )


class EdgeData(pt.Model):
    """A line, identified by the downstream bus it feeds (`v_of_edge`)."""

    edge_id: int = pt.Field(dtype=pl.Int32, unique=True)
    u_of_edge: int = pt.Field(dtype=pl.Int32)
    v_of_edge: int = pt.Field(dtype=pl.Int32, unique=True)
    r_pu: float = pt.Field(dtype=pl.Float64, default=0.0)
    x_pu: float = pt.Field(dtype=pl.Float64, default=0.0)
    s_max_pu: float = pt.Field(dtype=pl.Float64, default=10.0)


class GeneratorData(pt.Model):
    node_id: int = pt.Field(dtype=pl.Int32, unique=True)
    cost: float = pt.Field(dtype=pl.Float64, default=0.0)
    quad_cost: float = pt.Field(dtype=pl.Float64, default=0.0)
    p_max_pu: float = pt.Field(dtype=pl.Float64, default=0.0)
    q_max_pu: float = pt.Field(dtype=pl.Float64, default=0.0)


@dataclass
class FeederModel:
    node_data: pt.DataFrame[NodeData] = field(
        default_factory=lambda: NodeData.DataFrame(schema=NodeData.columns).cast()
    )
    edge_data: pt.DataFrame[EdgeData] = field(
        default_factory=lambda: EdgeData.DataFrame(schema=EdgeData.columns).cast()
    )
    generator_data: pt.DataFrame[GeneratorData] = field(
        default_factory=lambda: GeneratorData.DataFrame(
            schema=GeneratorData.columns
        ).cast()
    )
