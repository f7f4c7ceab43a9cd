"""Script bundles downloaded by machines at boot.

An asset is a zip archive of selected files from a source directory. Its
object key is derived from the bundled content, so identical content always
ends up under the same key. Assets are registered per deployment unit (one
environment) and looked up by a fixed id::

    asset = ASSETS.find_or_create(
        "production", "MyScripts", "/path/to/scripts", include=["run.sh"])

"""
import fnmatch
import hashlib
import io
import os
import os.path
import threading
import zipfile

# Fixed timestamp for archive members, the bundle only depends on content.
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def collect_files(source_path, include):
    """Return sorted paths (relative to `source_path`) matching `include`."""
    found = []
    for dirpath, dirnames, filenames in os.walk(source_path):
        dirnames.sort()
        for filename in filenames:
            relpath = os.path.relpath(
                os.path.join(dirpath, filename), source_path
            )
            relpath = relpath.replace(os.sep, "/")
            if any(fnmatch.fnmatchcase(relpath, p) for p in include):
                found.append(relpath)
    return sorted(found)


def build_bundle(source_path, include):
    files = collect_files(source_path, include)
    if not files:
        raise ValueError(
            f"No files in {source_path} match the include filter {include}"
        )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for relpath in files:
            info = zipfile.ZipInfo(relpath, date_time=ZIP_DATE_TIME)
            info.external_attr = 0o644 << 16
            info.compress_type = zipfile.ZIP_DEFLATED
            with open(os.path.join(source_path, relpath), "rb") as f:
                archive.writestr(info, f.read())
    return buffer.getvalue()


class Asset:
    """A content addressed zip bundle stored in an S3 bucket."""

    def __init__(
        self, deployment_unit, asset_id, source_path, include, bucket
    ):
        self.deployment_unit = deployment_unit
        self.asset_id = asset_id
        self.source_path = source_path
        self.include = list(include)
        self.bucket = bucket
        self.bundle = build_bundle(source_path, self.include)
        self.sha256 = hashlib.sha256(self.bundle).hexdigest()
        self.object_key = f"{self.sha256}.zip"
        self.readers = set()

    def __repr__(self):
        return f"<Asset {self.asset_id} s3://{self.bucket}/{self.object_key}>"

    @property
    def md5(self):
        return hashlib.md5(self.bundle).hexdigest()

    def grant_read(self, principal):
        self.readers.add(principal)


def grant_read(asset, principal):
    asset.grant_read(principal)


class AssetRegistry:
    """Assets keyed by deployment unit and id.

    At most one asset exists for an id within a deployment unit, also when
    assets are resolved from several threads.
    """

    def __init__(self, bucket_template="{deployment_unit}-assets"):
        self.bucket_template = bucket_template
        self._assets = {}
        self._lock = threading.Lock()

    def bucket_for(self, deployment_unit):
        return self.bucket_template.format(deployment_unit=deployment_unit)

    def find_existing(self, deployment_unit, asset_id):
        return self._assets.get((deployment_unit, asset_id))

    def create(self, deployment_unit, asset_id, source_path, include):
        key = (deployment_unit, asset_id)
        if key in self._assets:
            raise KeyError(
                f"Asset {asset_id} already exists in {deployment_unit}"
            )
        asset = Asset(
            deployment_unit,
            asset_id,
            source_path,
            include,
            self.bucket_for(deployment_unit),
        )
        self._assets[key] = asset
        return asset

    def find_or_create(self, deployment_unit, asset_id, source_path, include):
        with self._lock:
            asset = self.find_existing(deployment_unit, asset_id)
            if asset is None:
                asset = self.create(
                    deployment_unit, asset_id, source_path, include
                )
            return asset

    def assets(self, deployment_unit):
        return [
            asset
            for (unit, _), asset in sorted(self._assets.items())
            if unit == deployment_unit
        ]

    def clear(self, deployment_unit=None):
        with self._lock:
            for key in list(self._assets):
                if deployment_unit is None or key[0] == deployment_unit:
                    del self._assets[key]


ASSETS = AssetRegistry()
