import pytest
from batou.fixtures import root  # noqa: F401

from batou_mount.asset import ASSETS, AssetRegistry
from batou_mount.mountable import OperatingSystemType
from batou_mount.network import Connections
from batou_mount.userdata import LinuxUserData


class Target:
    """A bare mounting target, without batou."""

    def __init__(self, os_type=OperatingSystemType.LINUX):
        self.os_type = os_type
        self.connections = Connections("sg-target")
        self.user_data = LinuxUserData()
        self.grant_principal = "target-role"


@pytest.fixture(autouse=True)
def clean_assets():
    yield
    ASSETS.clear()


@pytest.fixture
def registry():
    return AssetRegistry()


@pytest.fixture
def target():
    return Target()


@pytest.fixture
def server():
    return Connections("sg-server")
