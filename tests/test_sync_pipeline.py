# tests/test_sync_pipeline.py

import io
from pathlib import Path

import localizable_sync as sync
from localizable_core import WalkAborted


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_find_files_filters_extension_and_excluded_names(tmp_path):
    keep = _write(tmp_path / "App" / "en.lproj" / "Localizable.strings", "")
    deep = _write(tmp_path / "a" / "b" / "c" / "ru.lproj" / "Other.strings", "")
    _write(tmp_path / "App" / "en.lproj" / "notes.txt", "")
    _write(tmp_path / "Pods" / "SBPWidget.framework" / "en.lproj" / "W.strings", "")
    _write(tmp_path / "x" / "y" / "SBPWidget.framework" / "ru.lproj" / "W.strings", "")
    # Directories are never filtered by extension
    odd = _write(tmp_path / "dir.strings" / "en.lproj" / "Inner.strings", "")

    found = sync.find_files(tmp_path, ["strings"], ["SBPWidget.framework"])

    assert sorted(found) == sorted([keep, deep, odd])


def test_find_files_unreadable_directory_aborts(tmp_path, monkeypatch):
    _write(tmp_path / "locked" / "en.lproj" / "L.strings", "")
    real_iterdir = Path.iterdir

    def fake_iterdir(self):
        if self.name == "locked":
            raise PermissionError("denied")
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", fake_iterdir)

    try:
        sync.find_files(tmp_path, ["strings"], [])
    except WalkAborted as e:
        assert e.path.name == "locked"
        assert "denied" in str(e)
    else:
        raise AssertionError("expected WalkAborted")


def test_end_to_end_adds_missing_key(tmp_path):
    en = _write(tmp_path / "App" / "en.lproj" / "Localizable.strings", '"a"="1";\n"b"="2";\n')
    ru = _write(tmp_path / "App" / "ru.lproj" / "Localizable.strings", '"a"="1";\n')
    _write(tmp_path / "App" / "en.lproj" / "InfoPlist.strings", '"CFBundleName" = "App";\n')

    lines = []
    report = sync.run_sync(sync.SyncOptions(root=tmp_path), log=lines.append)

    group = f"{tmp_path.as_posix()}/App/Localizable"
    assert report.groups[group] == {"en": en, "ru": ru}
    assert report.checked == [group]
    assert report.updated == {ru: ["b"]}
    assert report.ok
    assert ru.read_text(encoding="utf-8") == '"a"="1";\n"b" = "";\n'
    assert en.read_text(encoding="utf-8") == '"a"="1";\n"b"="2";\n'
    assert any("Added 1 key(s)" in line for line in lines)

    # Second run sees the placeholder as a key
    again = sync.run_sync(sync.SyncOptions(root=tmp_path))
    assert again.consistent == [group]
    assert again.updated == {}
    assert ru.read_text(encoding="utf-8").count('"b" = "";') == 1


def test_unreadable_group_is_reported_and_run_continues(tmp_path):
    _write(tmp_path / "A" / "en.lproj" / "L.strings", '"a" = "1";\n')
    bad = tmp_path / "A" / "ru.lproj" / "L.strings"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b"\xff\xfe\xff not utf-8")
    _write(tmp_path / "B" / "en.lproj" / "L.strings", '"x" = "1";\n"y" = "2";\n')
    de = _write(tmp_path / "B" / "de.lproj" / "L.strings", '"x" = "1";\n')

    lines = []
    report = sync.run_sync(sync.SyncOptions(root=tmp_path), log=lines.append)

    assert not report.ok
    assert len(report.failures) == 1
    assert "L.strings" in report.failures[0]
    assert report.updated == {de: ["y"]}
    assert any(line.startswith("ERROR:") for line in lines)


def test_single_language_groups_are_not_checked(tmp_path):
    _write(tmp_path / "en.lproj" / "Only.strings", '"a" = "1";\n')
    report = sync.run_sync(sync.SyncOptions(root=tmp_path))
    assert len(report.groups) == 1
    assert report.checked == []


def test_make_logger_mirrors_to_file(capsys):
    buf = io.StringIO()
    log = sync.make_logger(buf)
    log("hello")
    out = capsys.readouterr().out
    assert out.strip().endswith("hello")
    assert out.startswith("[")
    assert buf.getvalue() == out


def test_main_scans_program_dir(tmp_path, monkeypatch, capsys):
    _write(tmp_path / "en.lproj" / "L.strings", '"a" = "1";\n')
    ru = _write(tmp_path / "ru.lproj" / "L.strings", "")
    monkeypatch.setattr(sync, "_program_dir", lambda: tmp_path)

    assert sync.main() == 0
    assert ru.read_text(encoding="utf-8") == '"a" = "";\n'
    assert "Done:" in capsys.readouterr().out


def test_main_returns_1_when_walk_aborts(tmp_path, monkeypatch, capsys):
    def boom(root, extensions, exclude):
        raise WalkAborted(root, PermissionError("denied"))

    monkeypatch.setattr(sync, "_program_dir", lambda: tmp_path)
    monkeypatch.setattr(sync, "find_files", boom)

    assert sync.main() == 1
    assert "ERROR:" in capsys.readouterr().out


def test_second_run_is_clean_when_file_had_no_trailing_newline(tmp_path):
    _write(tmp_path / "en.lproj" / "L.strings", '"a" = "1";\n"b" = "2";\n')
    ru = _write(tmp_path / "ru.lproj" / "L.strings", '"a" = "1";')

    first = sync.run_sync(sync.SyncOptions(root=tmp_path))
    second = sync.run_sync(sync.SyncOptions(root=tmp_path))

    assert first.updated == {ru: ["b"]}
    assert second.updated == {}
    assert ru.read_text(encoding="utf-8") == '"a" = "1";\n"b" = "";\n'


def test_line_separator_in_value_does_not_add_placeholder(tmp_path):
    en = _write(tmp_path / "en.lproj" / "L.strings", '"a" = "x\u2028y";\n"b" = "2";\n')
    _write(tmp_path / "ru.lproj" / "L.strings", '"a" = "1";\n"b" = "2";\n')

    report = sync.run_sync(sync.SyncOptions(root=tmp_path))

    assert report.updated == {}
    assert report.consistent == [f"{tmp_path.as_posix()}/L"]
    assert '"a" = ""' not in en.read_text(encoding="utf-8")


def test_failed_append_is_reported_and_other_files_still_updated(tmp_path, monkeypatch):
    _write(tmp_path / "en.lproj" / "L.strings", '"a" = "1";\n"b" = "2";\n')
    de = _write(tmp_path / "de.lproj" / "L.strings", '"a" = "1";\n')
    ru = _write(tmp_path / "ru.lproj" / "L.strings", '"b" = "2";\n')
    real_add = sync.add_missing_keys_to_localizable_file

    def flaky_add(path, missing_keys):
        if path == de:
            raise sync.LocalizableError(path, PermissionError("read-only"), action="writing")
        return real_add(path, missing_keys)

    monkeypatch.setattr(sync, "add_missing_keys_to_localizable_file", flaky_add)

    lines = []
    report = sync.run_sync(sync.SyncOptions(root=tmp_path), log=lines.append)

    assert report.updated == {ru: ["a"]}
    assert len(report.failures) == 1
    assert "read-only" in report.failures[0]
    assert any(line.startswith("ERROR:") and "de.lproj" in line for line in lines)
    assert de.read_text(encoding="utf-8") == '"a" = "1";\n'
