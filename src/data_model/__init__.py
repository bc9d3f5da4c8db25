from data_model.node_edge import (
    FeederModel,
    NodeData,
    EdgeData,
    GeneratorData,
)
from data_model.ccopf_configs import (
    CCOPFSettings,
    SolverConfig,
    ThermalConstMethod,
    MissingSettingError,
)

__all__ = [
    "FeederModel",
    "NodeData",
    "EdgeData",
    "GeneratorData",
    "CCOPFSettings",
    "SolverConfig",
    "ThermalConstMethod",
    "MissingSettingError",
]
