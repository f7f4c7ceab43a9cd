import batou.component
import batou.lib.file
import pyaml

from batou_mount.asset import ASSETS
from batou_mount.mountable import OperatingSystemType
from batou_mount.network import Connections
from batou_mount.s3 import Upload
from batou_mount.userdata import LinuxUserData, UserData


class Instance(batou.component.Component):
    """A machine that mounts every NFS export provided in the environment.

    Writes the machine's user data script and a YAML manifest of the
    network access and asset permissions it needs::

        self += batou_mount.instance.Instance(
            security_group="sg-worker", role="worker")

    Pass an `s3` component to also publish the script bundles.
    """

    os_type = batou.component.Attribute(
        OperatingSystemType, batou.component.ConfigString("linux")
    )
    security_group = batou.component.Attribute(
        str, batou.component.ConfigString("default")
    )

    # Principal that needs read access to the downloaded bundles.
    role = batou.component.Attribute(
        str, batou.component.ConfigString("instance")
    )

    userdata_path = batou.component.Attribute(str, "user-data.sh")
    grants_path = batou.component.Attribute(str, "grants.yaml")

    s3 = None

    def configure(self):
        self.connections = Connections(self.security_group)
        self.user_data = LinuxUserData()
        self.grant_principal = self.role

        for nfs in self.require("nfs", strict=False):
            self.log(
                f"Mounting {nfs.server}:{nfs.serverpath} at "
                f"{nfs.mount_point.location}"
            )
            nfs.mountable.mount_to_linux_instance(self, nfs.mount_point)

        self += UserData(self.userdata_path, user_data=self.user_data)
        self._userdata_file = self._

        assets = [
            asset
            for asset in ASSETS.assets(self.environment.name)
            if self.grant_principal in asset.readers
        ]
        self += batou.lib.file.File(
            self.grants_path,
            content=pyaml.dump(self.grants(assets)),
            is_template=False,
        )
        self._grants_file = self._

        if self.s3 is not None:
            for asset in assets:
                self += Upload(asset.object_key, asset=asset, s3=self.s3)

    def grants(self, assets):
        return {
            "security_group": self.security_group,
            "egress": [
                {"peer": peer, "protocol": protocol, "port": port}
                for peer, protocol, port in self.connections.egress_rules()
            ],
            "assets": [
                {
                    "principal": self.grant_principal,
                    "bucket": asset.bucket,
                    "key": asset.object_key,
                }
                for asset in assets
            ],
        }
