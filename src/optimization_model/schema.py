from dataclasses import dataclass

from data_model import CCOPFSettings, ThermalConstMethod
from helpers import generate_log

log = generate_log(name=__name__)


@dataclass(frozen=True)
class ModelSchema:
    """Active variable and constraint groups of the chance-constrained OPF"""

    volt_cc: bool = False
    gen_cc: bool = False
    thermal_cc: bool = False
    thermal_method: ThermalConstMethod = ThermalConstMethod.NONE

    @property
    def any_cc(self) -> bool:
        return self.volt_cc or self.gen_cc or self.thermal_cc

    @classmethod
    def from_settings(cls, settings: CCOPFSettings) -> "ModelSchema":
        try:
            thermal_method = ThermalConstMethod(settings.thermal_const_method)
        except ValueError:
            log.warning(
                f"Thermal constraint method {settings.thermal_const_method} unknown. "
                "Proceeding with unconstrained lines."
            )
            thermal_method = ThermalConstMethod.NONE
        return cls(
            volt_cc=settings.toggle_volt_cc,
            gen_cc=settings.toggle_gen_cc,
            thermal_cc=settings.toggle_thermal_cc,
            thermal_method=thermal_method,
        )
