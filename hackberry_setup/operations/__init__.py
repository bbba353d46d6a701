from __future__ import annotations

from typing import List

from ..lib.manifests import Manifest
from ..operation import Operation
from .op_10_firmware_tools import FirmwareToolsOperation
from .op_20_cpu_governor import CpuGovernorOperation
from .op_25_fstab_noatime import FstabNoatimeOperation
from .op_30_service_optimization import DisableUnitsOperation, ServiceOptimizationOperation
from .op_35_cloud_cleanup import CloudCleanupOperation
from .op_40_network_backend import NetworkBackendOperation
from .op_50_display_layout import DisplayLayoutOperation
from .op_55_device_tree import DeviceTreeOverlayOperation
from .op_60_display_manager import AutoLoginOperation, DisplayManagerOperation
from .op_70_wifi import WifiRadioOperation
from .op_75_bluetooth import BluetoothRfkillOperation

__all__ = [
    "FirmwareToolsOperation",
    "CpuGovernorOperation",
    "FstabNoatimeOperation",
    "DisableUnitsOperation",
    "ServiceOptimizationOperation",
    "CloudCleanupOperation",
    "NetworkBackendOperation",
    "DisplayLayoutOperation",
    "DeviceTreeOverlayOperation",
    "DisplayManagerOperation",
    "AutoLoginOperation",
    "WifiRadioOperation",
    "BluetoothRfkillOperation",
    "build_operations",
]


def build_operations(manifest: Manifest) -> List[Operation]:
    """The fixed sequence. Later operations rely on packages installed earlier."""

    return [
        FirmwareToolsOperation(manifest),
        CpuGovernorOperation(manifest),
        FstabNoatimeOperation(manifest),
        ServiceOptimizationOperation(manifest),
        CloudCleanupOperation(manifest),
        NetworkBackendOperation(manifest),
        DisplayLayoutOperation(manifest),
        DeviceTreeOverlayOperation(manifest),
        DisplayManagerOperation(manifest),
        AutoLoginOperation(manifest),
        WifiRadioOperation(),
        BluetoothRfkillOperation(),
    ]
