"""Mount an existing NFS export on Linux machines at first boot.

Usage in a deployment::

    class Fileserver(batou.component.Component):

        def configure(self):
            self += batou_mount.nfs.NFS(
                server="nfs.example.com", security_group="sg-nfs")

    class Worker(batou.component.Component):

        def configure(self):
            self += batou_mount.instance.Instance(
                security_group="sg-worker", role="worker")

Security considerations: machines using this download and run the bundled
mount script from the assets bucket when they boot. Restrict write access to
that bucket.
"""
import enum
import os.path
import uuid
from dataclasses import dataclass, field
from typing import Optional, Tuple

import batou
import batou.component

from batou_mount.asset import ASSETS, AssetRegistry
from batou_mount.mountable import (
    LinuxMountPoint,
    MountingInstance,
    MountPermissions,
    OperatingSystemType,
    to_linux_mount_option,
)
from batou_mount.network import Connections, Port

SCRIPTS_PATH = os.path.join(os.path.dirname(__file__), "resources", "bash")

MOUNT_ASSET_UUID = uuid.UUID("bc791c1b-2b48-4712-bf58-0f96e31320c6")
MOUNT_ASSET_ID = "MountableNfsAsset" + MOUNT_ASSET_UUID.hex

# 111: portmapper, 2049: nfsd
NFS_PORTS = (111, 2049)


class UnsupportedPlatform(Exception):
    pass


class NfsVersion(enum.Enum):
    NFS = "nfs"
    NFS_V4 = "nfs4"


@dataclass(frozen=True)
class NfsLinuxOptions:

    # Joined by commas after the permission option, e.g.
    # ("soft", "rsize=4096") becomes "rw,soft,rsize=4096".
    extra_mount_options: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "extra_mount_options", tuple(self.extra_mount_options)
        )


@dataclass(frozen=True)
class MountableNfsProps:
    """How to reach and mount an NFS export.

    `host_connections` is the network principal of the NFS host. If given,
    mounting machines are allowed to reach it on 111 and 2049 (tcp and
    udp) plus `host_extra_ports`. Without it, no access is granted at all
    and `host_extra_ports` has no effect.
    """

    nfs_version: NfsVersion
    hostname: str
    export_path: str
    host_connections: Optional[Connections] = None
    host_extra_ports: Tuple[Port, ...] = ()
    linux_options: NfsLinuxOptions = field(default_factory=NfsLinuxOptions)

    def __post_init__(self):
        object.__setattr__(self, "nfs_version", NfsVersion(self.nfs_version))
        if not self.hostname:
            raise ValueError("`hostname` must be set.")
        object.__setattr__(
            self, "host_extra_ports", tuple(self.host_extra_ports)
        )


class MountableNfs:
    """Scripting to mount an existing NFS export onto a Linux machine."""

    def __init__(
        self,
        deployment_unit: str,
        props: MountableNfsProps,
        registry: AssetRegistry = ASSETS,
    ):
        self.deployment_unit = deployment_unit
        self.props = props
        self.registry = registry

    def mount_to_linux_instance(
        self, target: MountingInstance, mount: LinuxMountPoint
    ) -> None:
        if target.os_type is not OperatingSystemType.LINUX:
            raise UnsupportedPlatform("Target instance must be Linux.")

        if self.props.host_connections is not None:
            for port in NFS_PORTS:
                target.connections.allow_to(
                    self.props.host_connections, Port.tcp(port)
                )
                target.connections.allow_to(
                    self.props.host_connections, Port.udp(port)
                )
            for port in self.props.host_extra_ports:
                target.connections.allow_to(self.props.host_connections, port)

        asset = self.mount_asset_singleton()
        asset.grant_read(target.grant_principal)
        mount_script = target.user_data.add_s3_download_command(
            bucket=asset.bucket, bucket_key=asset.object_key
        )

        mount_options = [to_linux_mount_option(mount.permissions)]
        mount_options.extend(self.props.linux_options.extra_mount_options)
        mount_options = ",".join(mount_options)

        target.user_data.add_commands(
            "TMPDIR=$(mktemp -d)",
            'pushd "$TMPDIR"',
            f"unzip {mount_script}",
            f"bash ./mountNfs.sh {self.props.nfs_version.value} "
            f"{self.props.hostname} '{self.props.export_path}' "
            f"'{mount.location}' {mount_options}",
            "popd",
            f"rm -f {mount_script}",
        )

    def mount_asset_singleton(self):
        """The mount script bundle, shared by the whole deployment unit."""
        return self.registry.find_or_create(
            self.deployment_unit,
            MOUNT_ASSET_ID,
            SCRIPTS_PATH,
            include=["mountNfs.sh"],
        )


class NFS(batou.component.Component):
    """
    A component to help ensure you got access paths for NFS in sync
    for your deployment.

    Provides itself as `nfs`. Every `Instance` in the environment mounts
    `serverpath` from `server` at `basepath` when it boots.

    Defaults are based on Flyingcircus' NixOS environment.
    """

    # Path where NFS on client is mounted on
    basepath = batou.component.Attribute(
        str, batou.component.ConfigString("/mnt/nfs/shared/")
    )

    # Path where NFS-share is located on the NFS server
    serverpath = batou.component.Attribute(
        str, batou.component.ConfigString("/srv/nfs/shared/")
    )

    # Hostname or IP address of the NFS server
    server = batou.component.Attribute(
        str, batou.component.ConfigString("nfs")
    )
    version = batou.component.Attribute(
        str, batou.component.ConfigString("nfs4")
    )

    # rw or ro
    permissions = batou.component.Attribute(
        str, batou.component.ConfigString("rw")
    )

    # Security group of the NFS host. Without it no access is granted.
    security_group = batou.component.Attribute(str, default=None)

    # Extra options for mount(8), e.g. "soft,timeo=100"
    mount_options = batou.component.Attribute(
        "list", batou.component.ConfigString("")
    )

    # Extra ports on the NFS host, e.g. "tcp/20048,udp/20048"
    extra_ports = batou.component.Attribute(
        "list", batou.component.ConfigString("")
    )

    def configure(self):
        self.connections = None
        if self.security_group:
            self.connections = Connections(self.security_group)
        elif self.extra_ports:
            batou.output.annotate(
                f"NFS {self.server}: extra_ports without security_group "
                "have no effect",
                yellow=True,
            )

        self.props = MountableNfsProps(
            nfs_version=self.version,
            hostname=self.server,
            export_path=self.serverpath,
            host_connections=self.connections,
            host_extra_ports=[Port.parse(p) for p in self.extra_ports],
            linux_options=NfsLinuxOptions(self.mount_options),
        )
        self.mountable = MountableNfs(self.environment.name, self.props)
        self.mount_point = LinuxMountPoint(
            self.basepath, MountPermissions(self.permissions)
        )
        self.provide("nfs", self)
