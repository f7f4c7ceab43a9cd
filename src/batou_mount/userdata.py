import posixpath
from unittest.mock import Mock

import batou.component
import batou.lib.file


class LinuxUserData:
    """Shell commands executed once when a Linux machine boots the first time.

    Commands are rendered in the order they were added.
    """

    shebang = "#!/bin/bash"

    def __init__(self):
        self.lines = []

    def add_commands(self, *commands):
        self.lines.extend(commands)

    def add_s3_download_command(self, bucket, bucket_key, local_file=None):
        """Download `s3://<bucket>/<bucket_key>` at boot.

        Returns the path the object will have on the booted machine.
        """
        local_file = local_file or posixpath.join("/tmp", bucket_key)
        self.add_commands(
            f"mkdir -p $(dirname '{local_file}')",
            f"aws s3 cp 's3://{bucket}/{bucket_key}' '{local_file}'",
        )
        return local_file

    def render(self):
        return "\n".join([self.shebang] + self.lines)


class UserData(batou.component.Component):
    """Write a rendered user data script.

    Usage::

        self += batou_mount.userdata.UserData(
            "user-data.sh", user_data=self.user_data)

    """

    _required_params_ = {"user_data": Mock(render=Mock(return_value=""))}
    namevar = "path"
    user_data = batou.component.Attribute()

    def configure(self):
        self += batou.lib.file.File(
            self.path,
            content=self.user_data.render() + "\n",
            is_template=False,
            mode=0o755,
        )
        self.path = self._.path
