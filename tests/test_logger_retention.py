import os


def _touch(path, mtime):
    path.write_text("x")
    os.utime(path, (mtime, mtime))


def test_retention_prunes_old_logs(tmp_path):
    from scenevault.logger.retention import enforce_retention

    for i in range(5):
        _touch(tmp_path / f"{i}.log", 1_000_000 + i)

    removed = enforce_retention(tmp_path, keep=2)

    remaining = sorted(p.name for p in tmp_path.glob("*.log"))
    assert removed == 3
    assert remaining == ["3.log", "4.log"]


def test_retention_never_removes_protected_log(tmp_path):
    from scenevault.logger.retention import enforce_retention

    for i in range(3):
        _touch(tmp_path / f"{i}.log", 1_000_000 + i)
    current = tmp_path / "0.log"

    enforce_retention(tmp_path, keep=1, protect=current)

    assert current.exists()
    assert (tmp_path / "2.log").exists()
    assert not (tmp_path / "1.log").exists()


def test_retention_disabled_or_missing_dir(tmp_path):
    from scenevault.logger.retention import enforce_retention

    _touch(tmp_path / "a.log", 1_000_000)

    assert enforce_retention(tmp_path, keep=0) == 0
    assert enforce_retention(tmp_path / "nope", keep=1) == 0
    assert (tmp_path / "a.log").exists()
