from scenevault.env import exports_dir, logs_dir, module_logs_dir, out_file


def test_module_logs_dir_created(tmp_path):
    path = module_logs_dir("check")

    assert path.exists()
    assert path == logs_dir() / "check"
    assert path.is_relative_to(tmp_path.resolve())


def test_out_file_defaults_to_exports(tmp_path):
    path = out_file("x.json")

    assert path.parent == exports_dir()
    assert path.parent.exists()


def test_out_file_explicit_dir(tmp_path):
    target = tmp_path / "elsewhere"
    path = out_file("x.csv", target)

    assert path == target / "x.csv"
    assert target.exists()
