import batou
import botocore.exceptions
import pytest

from batou_mount.asset import Asset
from batou_mount.nfs import SCRIPTS_PATH
from batou_mount.s3 import Upload


@pytest.fixture
def upload(root, mocker):
    asset = Asset("test", "Scripts", SCRIPTS_PATH, ["mountNfs.sh"], "bucket")
    s3 = mocker.Mock()
    c = Upload(asset.object_key, asset=asset, s3=s3)
    c.prepare(root)
    return c


def test_missing_object_needs_upload(upload, mocker):
    type(upload.obj).e_tag = mocker.PropertyMock(
        side_effect=botocore.exceptions.ClientError(
            {"Error": {"Code": "404"}}, "HeadObject"
        )
    )
    with pytest.raises(batou.UpdateNeeded):
        upload.verify()


def test_changed_object_needs_upload(upload):
    upload.obj.e_tag = '"0123456789abcdef"'
    with pytest.raises(batou.UpdateNeeded):
        upload.verify()


def test_uploaded_object_is_current(upload):
    upload.obj.e_tag = f'"{upload.asset.md5}"'
    upload.verify()


def test_update_uploads_bundle(upload):
    upload.update()
    (fileobj,), _ = upload.obj.upload_fileobj.call_args
    assert upload.asset.bundle == fileobj.read()
