from enum import IntEnum
from typing import Any, Mapping
import numpy as np
from pydantic import BaseModel, Field, field_validator

from helpers.konfig import settings


class ThermalConstMethod(IntEnum):
    """Encoding of the deterministic thermal line limit"""

    NONE = 0
    EXACT_SOC = 1
    POLYHEDRAL = 2


class MissingSettingError(KeyError):
    """A required key of the settings bundle is absent"""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Missing required setting '{self.key}'"


class CCOPFSettings(BaseModel):
    """Settings bundle selecting the active chance constraints and their risk levels"""

    var_vec: list[float] = Field(
        description="Uncertainty basis, one entry per uncertainty source.",
    )
    Σ: list[list[float]] = Field(
        description="Covariance of the uncertain net injections, one row/column per bus in node_id order.",
    )
    z_g: float = Field(
        description="Standard-normal quantile of the generation chance constraints.",
    )
    z_v: float = Field(
        description="Standard-normal quantile of the voltage chance constraints.",
    )
    toggle_volt_cc: bool = Field(description="Enable voltage chance constraints.")
    toggle_gen_cc: bool = Field(description="Enable generation chance constraints.")
    toggle_thermal_cc: bool = Field(
        description="Enable thermal line limit chance constraints."
    )
    thermal_const_method: int = Field(
        description="Deterministic thermal limit: 0 none, 1 exact SOC, 2 polyhedral (12 facets).",
    )
    vfac: float = Field(
        description="Relative voltage band; when positive it replaces the bus voltage bounds.",
    )
    qcfac: float = Field(
        description="Scaling factor applied to the quadratic generation cost.",
    )
    output_level: int = Field(description="Solver verbosity, 0 is silent.")
    Ψ: float = Field(description="Weight of the voltage variance penalty.")
    loadfac: float | None = Field(
        default=None,
        description="Optional uniform load scaling keeping each bus power factor.",
    )

    @field_validator("Σ", mode="before")
    @classmethod
    def _covariance_from_array(cls, value: Any) -> Any:
        if isinstance(value, np.ndarray):
            return value.tolist()
        return value

    @property
    def covariance(self) -> np.ndarray:
        return np.array(self.Σ, dtype=float)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "CCOPFSettings":
        """
        Build the settings from a plain mapping.

        Raises:
            MissingSettingError: If a key other than `loadfac` is absent.
        """
        for name, field_info in cls.model_fields.items():
            if field_info.is_required() and name not in mapping:
                raise MissingSettingError(name)
        return cls(**mapping)


class SolverConfig(BaseModel):
    """Configuration of the external conic solver"""

    solver_name: str = Field(
        default_factory=lambda: settings.solver_name,
        description="Name of the Pyomo solver plugin used to solve the model.",
    )
    threads: int | None = Field(
        default=None,
        description="Number of solver threads to use; defaults to solver choice if unset.",
    )
    time_limit: int = Field(
        default=60,
        description="Maximum wall-clock time allowed for the solver in seconds.",
    )
    optimality_tolerance: float = Field(
        default=1e-6, description="Tolerance for declaring optimality of the solution."
    )
    feasibility_tolerance: float = Field(
        default=1e-6, description="Tolerance for constraint feasibility checks."
    )
    solver_qcp_dual: int | None = Field(
        default=1,
        description="Compute dual values of quadratically constrained programs.",
    )
