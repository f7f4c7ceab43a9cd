"""Publish asset bundles to S3

Machines download mount scripts from the assets bucket at boot, so the
bundles have to be uploaded during the deployment::

    self += batou_mount.s3.S3(endpoint_url="https://my.s3.endpoint",
                              access_key_id="1234567890ABCDEF",
                              secret_access_key="very_secure!1!")
    self.s3 = self._
    self += batou_mount.s3.Upload(asset.object_key, asset=asset, s3=self.s3)

"""
import io
from unittest.mock import Mock

import batou
import batou.component
import boto3
import botocore.exceptions


class S3(batou.component.Component):
    """Configuration for an S3 connection and its credentials.

    Keyword arguments:
    access_key_id     -- The S3 access key ID
    secret_access_key -- The S3 secret access key
    endpoint_url      -- The S3 enpoint's URL
    """

    _required_params_ = {
        "access_key_id": "value",
        "secret_access_key": "value",
        "endpoint_url": "value",
    }
    endpoint_url = batou.component.Attribute(str)
    access_key_id = batou.component.Attribute(str)
    secret_access_key = batou.component.Attribute(str)

    def configure(self):
        self.client = boto3.resource(
            "s3",
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            endpoint_url=self.endpoint_url,
        )


class Upload(batou.component.Component):
    """
    Uploads an asset bundle to its bucket unless the same content is
    already there.

    Usage::

        self += batou_mount.s3.Upload(asset.object_key, asset=asset, s3=s3)
    """

    _required_params_ = {
        "asset": Mock(),
        "s3": Mock(),
    }
    namevar = "key"
    s3 = batou.component.Attribute()
    asset = batou.component.Attribute()

    def configure(self):
        self.obj = self.s3.client.Object(self.asset.bucket, self.key)

    def verify(self):
        try:
            remote_etag = self.obj.e_tag
        except botocore.exceptions.ClientError:
            # Usually a 404, the object has not been uploaded yet.
            raise batou.UpdateNeeded()
        if remote_etag.strip('"') != self.asset.md5:
            raise batou.UpdateNeeded()

    def update(self):
        self.log(f"Uploading s3://{self.asset.bucket}/{self.key}")
        self.obj.upload_fileobj(io.BytesIO(self.asset.bundle))
