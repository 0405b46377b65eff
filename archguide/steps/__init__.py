from __future__ import annotations

from typing import Dict

from ..tree import StepGroup, validate_stages
from .step_100_setup import CreatePersistDirStep, ReadmeStep
from .step_200_preinstallation import (
    FormatPartitionsStep,
    InternetConnectionStep,
    MountFilesystemsStep,
    PartitionDisksStep,
    SetKeyboardLayoutStep,
    UpdateSystemClockStep,
    VerifyBootModeStep,
)
from .step_300_installation import (
    ChrootStep,
    GenerateFstabStep,
    GeneratePackageNamesFileStep,
    PacstrapStep,
    SelectMirrorsStep,
)
from .step_400_configuration import (
    CreateLocaleConfStep,
    GenerateAdjtimeStep,
    GenerateHostsStep,
    GenerateLocalesStep,
    GrubMkconfigStep,
    InstallGrubStep,
    OtherBootManagerStep,
    RecreateInitramfsStep,
    RunOsProberStep,
    SelectLocalesStep,
    SetDefaultKeyboardLayoutStep,
    SetHostnameStep,
    SetRootPasswordStep,
    SetTimeZoneStep,
)
from .step_500_finish import CleanupStep, RebootStep

STAGE_NAMES = ("start", "chroot")


def build_stages() -> Dict[str, StepGroup]:
    """The installation tree. Step ids are completion-log keys: never reuse one."""

    cleanup = CleanupStep()

    start = StepGroup(
        "start",
        [
            StepGroup("100_setup", [ReadmeStep(), CreatePersistDirStep()]),
            StepGroup(
                "200_preinstallation",
                [
                    SetKeyboardLayoutStep(),
                    VerifyBootModeStep(),
                    InternetConnectionStep(),
                    UpdateSystemClockStep(),
                    StepGroup(
                        "250_prepare_filesystems",
                        [PartitionDisksStep(), FormatPartitionsStep(), MountFilesystemsStep()],
                    ),
                ],
            ),
            StepGroup(
                "300_installation",
                [
                    StepGroup(
                        "310_packages",
                        [SelectMirrorsStep(), GeneratePackageNamesFileStep(), PacstrapStep()],
                    ),
                    GenerateFstabStep(),
                    ChrootStep(),
                ],
            ),
            cleanup,
            RebootStep(),
        ],
    )

    chroot = StepGroup(
        "chroot",
        [
            StepGroup(
                "400_configuration",
                [
                    StepGroup("410_system_time", [SetTimeZoneStep(), GenerateAdjtimeStep()]),
                    StepGroup(
                        "420_localization",
                        [
                            SelectLocalesStep(),
                            GenerateLocalesStep(),
                            CreateLocaleConfStep(),
                            SetDefaultKeyboardLayoutStep(),
                        ],
                    ),
                    StepGroup("430_network_configuration", [SetHostnameStep(), GenerateHostsStep()]),
                    RecreateInitramfsStep(),
                    SetRootPasswordStep(),
                    StepGroup(
                        "460_boot_manager",
                        [InstallGrubStep(), RunOsProberStep(), GrubMkconfigStep(), OtherBootManagerStep()],
                    ),
                ],
            ),
            cleanup,
        ],
    )

    stages = {"start": start, "chroot": chroot}
    validate_stages(stages)
    return stages


__all__ = ["STAGE_NAMES", "build_stages"]
