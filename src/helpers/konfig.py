from dataclasses import dataclass
from pathlib import Path
from typing import cast
from dynaconf import Dynaconf


@dataclass
class Settings:
    solver_name: str
    log_level: str


settings_not_casted = Dynaconf(
    envvar_prefix="CCOPF",
    settings_files=["settings.toml", ".secrets.toml"],
    root_path=Path(__file__).parent,
)

settings = cast(
    Settings,
    settings_not_casted,
)
