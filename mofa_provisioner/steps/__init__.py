from .step_10_check_prerequisites import CheckPrerequisitesStep
from .step_20_system_packages import InstallSystemPackagesStep
from .step_30_create_environment import CreateEnvironmentStep
from .step_40_install_dependencies import InstallDependenciesStep
from .step_50_install_dora_cli import InstallDoraCliStep
from .step_60_build_plugins import BuildPluginsStep
from .step_70_reapply_pins import ReapplyPinsStep
from .step_90_summary import SummaryStep

__all__ = [
    "CheckPrerequisitesStep",
    "InstallSystemPackagesStep",
    "CreateEnvironmentStep",
    "InstallDependenciesStep",
    "InstallDoraCliStep",
    "BuildPluginsStep",
    "ReapplyPinsStep",
    "SummaryStep",
]
