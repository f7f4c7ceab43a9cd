import enum
import posixpath
from dataclasses import dataclass
from typing import Protocol

from batou_mount.network import Connections
from batou_mount.userdata import LinuxUserData


class OperatingSystemType(enum.Enum):
    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class MountPermissions(enum.Enum):
    """Permission a filesystem is mounted with."""

    READWRITE = "rw"
    READONLY = "ro"


def to_linux_mount_option(permissions):
    """Convert `permissions` into the option token understood by mount(8)."""
    if permissions is MountPermissions.READONLY:
        return "r"
    if permissions is MountPermissions.READWRITE:
        return "rw"
    raise ValueError(f"Unhandled mount permission: {permissions!r}")


@dataclass(frozen=True)
class LinuxMountPoint:
    """Where and how a filesystem is mounted on a Linux target.

    `location` is normalized, so ``/mnt//nfs/`` and ``/mnt/nfs`` describe
    the same mount point.
    """

    location: str
    permissions: MountPermissions = MountPermissions.READWRITE

    def __post_init__(self):
        object.__setattr__(
            self, "location", posixpath.normpath(self.location)
        )
        object.__setattr__(
            self, "permissions", MountPermissions(self.permissions)
        )


class MountingInstance(Protocol):
    """A machine that a filesystem can be mounted onto."""

    os_type: OperatingSystemType
    connections: Connections
    user_data: LinuxUserData
    grant_principal: str


class MountableLinuxFilesystem(Protocol):
    """Something that can be mounted on a Linux machine at first boot."""

    def mount_to_linux_instance(
        self, target: MountingInstance, mount: LinuxMountPoint
    ) -> None:
        ...
