from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class ModelMetadata:
    """
    Information needed to interpret a solved model: the cone index of every non-root bus
    and the configuration the model was built with.
    """

    idx_to_bus: dict[int, int]
    bus_to_idx: dict[int, int]
    toggle_volt_cc: bool
    toggle_gen_cc: bool
    toggle_thermal_cc: bool
    thermal_const_method: int
    any_cc: bool
    z_v: float
    z_g: float
    s: float
    Σ: np.ndarray
