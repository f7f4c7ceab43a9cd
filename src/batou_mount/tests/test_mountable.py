import pytest

from batou_mount.mountable import (
    LinuxMountPoint,
    MountPermissions,
    to_linux_mount_option,
)


def test_mount_point_defaults_to_readwrite():
    assert MountPermissions.READWRITE == LinuxMountPoint("/mnt").permissions


@pytest.mark.parametrize(
    "location, normalized",
    [
        ("/mnt//nfs/", "/mnt/nfs"),
        ("/mnt/./nfs", "/mnt/nfs"),
        ("/mnt/data/../nfs", "/mnt/nfs"),
        ("/mnt/nfs", "/mnt/nfs"),
    ],
)
def test_mount_point_location_is_normalized(location, normalized):
    assert normalized == LinuxMountPoint(location).location


def test_mount_point_accepts_permission_values():
    assert (
        MountPermissions.READONLY
        == LinuxMountPoint("/mnt", "ro").permissions
    )


def test_empty_mount_point_location_normalizes_to_current_dir():
    assert "." == LinuxMountPoint("").location


def test_linux_mount_options():
    assert "rw" == to_linux_mount_option(MountPermissions.READWRITE)
    assert "r" == to_linux_mount_option(MountPermissions.READONLY)
