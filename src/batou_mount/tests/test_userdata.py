from batou_mount.userdata import LinuxUserData, UserData


def test_s3_download_defaults_to_tmp():
    user_data = LinuxUserData()
    path = user_data.add_s3_download_command("bucket", "abc.zip")

    assert "/tmp/abc.zip" == path
    assert [
        "mkdir -p $(dirname '/tmp/abc.zip')",
        "aws s3 cp 's3://bucket/abc.zip' '/tmp/abc.zip'",
    ] == user_data.lines


def test_s3_download_to_explicit_path():
    user_data = LinuxUserData()
    path = user_data.add_s3_download_command(
        "bucket", "abc.zip", local_file="/opt/scripts.zip"
    )
    assert "/opt/scripts.zip" == path


def test_render_keeps_command_order():
    user_data = LinuxUserData()
    user_data.add_commands("echo 1", "echo 2")
    user_data.add_commands("echo 3")

    assert "#!/bin/bash\necho 1\necho 2\necho 3" == user_data.render()


def test_userdata_component_writes_rendered_script(root):
    user_data = LinuxUserData()
    user_data.add_commands('pushd "$TMPDIR"')
    c = UserData("user-data.sh", user_data=user_data)
    c.prepare(root)

    assert c.path.endswith("/user-data.sh")
    assert b'#!/bin/bash\npushd "$TMPDIR"\n' == c._.content
