import os

import pytest

from core.errors import RewriteError
from tasks.hosts_file import (
    ensure_loopback_entry,
    render_hosts,
    rewrite_hosts_lines,
    update_hosts_file,
)


def test_scenario_rename_and_loopback():
    content = "127.0.0.1 localhost\n192.168.1.5 myhost\n"
    assert render_hosts(content, "myhost", "newhost") == \
        "127.0.0.1 localhost newhost\n192.168.1.5 newhost\n"


def test_only_exact_tokens_are_replaced():
    lines = ["10.0.0.2 myhost.example myhost"]
    assert rewrite_hosts_lines(lines, "myhost", "newhost") == ["10.0.0.2 myhost.example newhost"]


def test_dots_are_not_treated_as_wildcards():
    lines = ["10.0.0.3 myhostXexample", "10.0.0.4 my.host"]
    assert rewrite_hosts_lines(lines, "my.host", "newhost") == ["10.0.0.3 myhostXexample", "10.0.0.4 newhost"]


def test_comments_and_blank_lines_pass_through():
    lines = ["# myhost lives here", "", "   ", "  # 10.0.0.1 myhost"]
    assert rewrite_hosts_lines(lines, "myhost", "newhost") == lines


def test_inline_comment_and_address_untouched():
    lines = ["10.0.0.1\tmyhost  alias   # was myhost"]
    assert rewrite_hosts_lines(lines, "myhost", "newhost") == ["10.0.0.1\tnewhost  alias   # was myhost"]


def test_every_occurrence_on_a_line_is_replaced():
    lines = ["10.0.0.1 myhost other myhost"]
    assert rewrite_hosts_lines(lines, "myhost", "newhost") == ["10.0.0.1 newhost other newhost"]


def test_localhost_is_never_renamed():
    lines = ["127.0.0.1 localhost", "::1 localhost ip6-localhost"]
    assert rewrite_hosts_lines(lines, "localhost", "newhost") == lines


def test_loopback_prepended_when_missing():
    lines = ["192.168.1.5 other"]
    assert ensure_loopback_entry(lines, "newhost") == ["127.0.0.1 localhost newhost", "192.168.1.5 other"]


def test_loopback_prepended_when_127_line_has_no_localhost():
    lines = ["127.0.0.1 something"]
    assert ensure_loopback_entry(lines, "newhost") == ["127.0.0.1 localhost newhost", "127.0.0.1 something"]


def test_loopback_appended_before_inline_comment():
    lines = ["127.0.0.1 localhost  # loopback", "127.0.0.1 localhost second"]
    assert ensure_loopback_entry(lines, "newhost") == [
        "127.0.0.1 localhost newhost  # loopback",
        "127.0.0.1 localhost second",
    ]


def test_loopback_left_alone_when_present():
    lines = ["127.0.0.1 localhost newhost"]
    assert ensure_loopback_entry(lines, "newhost") == lines


def test_rewrite_is_idempotent():
    content = "# header\n127.0.0.1 localhost\n10.0.0.2 myhost.example myhost\n"
    once = render_hosts(content, "myhost", "newhost")
    assert render_hosts(once, "myhost", "newhost") == once
    assert once.count("newhost") == 2


def test_only_targeted_lines_change():
    before = ["# comment", "127.0.0.1 localhost", "10.0.0.1 db", "10.0.0.2 myhost", "::1 ip6-localhost"]
    after = render_hosts("\n".join(before) + "\n", "myhost", "newhost").splitlines()

    assert len(after) == len(before)
    changed = [(a, b) for a, b in zip(before, after) if a != b]
    assert changed == [
        ("127.0.0.1 localhost", "127.0.0.1 localhost newhost"),
        ("10.0.0.2 myhost", "10.0.0.2 newhost"),
    ]


def test_empty_file_gets_loopback_entry():
    assert render_hosts("", "myhost", "newhost") == "127.0.0.1 localhost newhost\n"


def test_update_hosts_file_writes_in_place(hosts_file, tmp_path):
    backup = tmp_path / "hosts.backup"
    backup.write_text(hosts_file.read_text())
    os.chmod(hosts_file, 0o644)

    update_hosts_file(hosts_file, "newhost", "myhost", backup)

    assert hosts_file.read_text() == "127.0.0.1 localhost newhost\n192.168.1.5 newhost\n"
    assert oct(hosts_file.stat().st_mode & 0o777) == "0o644"
    # No temp files left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["hosts", "hosts.backup"]


def test_update_hosts_file_restores_backup_on_write_failure(hosts_file, tmp_path, monkeypatch):
    original = hosts_file.read_text()
    backup = tmp_path / "hosts.backup"
    backup.write_text(original)

    def broken_replace(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("tasks.hosts_file.os.replace", broken_replace)

    with pytest.raises(RewriteError) as excinfo:
        update_hosts_file(hosts_file, "newhost", "myhost", backup)

    assert excinfo.value.restored
    assert hosts_file.read_text() == original
    assert sorted(p.name for p in tmp_path.iterdir()) == ["hosts", "hosts.backup"]


def test_update_hosts_file_falls_back_to_in_place_write_for_bind_mounts(hosts_file, tmp_path, monkeypatch):
    backup = tmp_path / "hosts.backup"
    backup.write_text(hosts_file.read_text())

    def busy_replace(src, dst):
        raise OSError(16, "Device or resource busy")

    monkeypatch.setattr("tasks.hosts_file.os.replace", busy_replace)

    update_hosts_file(hosts_file, "newhost", "myhost", backup)

    assert hosts_file.read_text() == "127.0.0.1 localhost newhost\n192.168.1.5 newhost\n"


def test_crlf_line_endings_are_kept():
    content = "127.0.0.1 localhost\r\n192.168.1.5 myhost\r\n"
    assert render_hosts(content, "myhost", "newhost") == \
        "127.0.0.1 localhost newhost\r\n192.168.1.5 newhost\r\n"


def test_update_hosts_file_keeps_crlf_on_disk(tmp_path):
    hosts = tmp_path / "hosts"
    hosts.write_bytes(b"127.0.0.1 localhost\r\n10.0.0.2 myhost\r\n")
    backup = tmp_path / "hosts.backup"
    backup.write_bytes(hosts.read_bytes())

    update_hosts_file(hosts, "newhost", "myhost", backup)

    assert hosts.read_bytes() == b"127.0.0.1 localhost newhost\r\n10.0.0.2 newhost\r\n"


def test_update_hosts_file_reads_utf8_regardless_of_locale(tmp_path):
    hosts = tmp_path / "hosts"
    hosts.write_bytes("# café server\n10.0.0.2 myhost\n".encode("utf-8"))
    backup = tmp_path / "hosts.backup"
    backup.write_bytes(hosts.read_bytes())

    update_hosts_file(hosts, "newhost", "myhost", backup)

    assert hosts.read_bytes().decode("utf-8") == \
        "127.0.0.1 localhost newhost\n# café server\n10.0.0.2 newhost\n"


def test_unreadable_hosts_file_is_reported_as_not_written(tmp_path):
    hosts = tmp_path / "hosts"
    hosts.write_bytes(b"10.0.0.2 myhost \xff\xfe\n")
    original = hosts.read_bytes()

    with pytest.raises(RewriteError) as excinfo:
        update_hosts_file(hosts, "newhost", "myhost", tmp_path / "unused.backup")

    assert excinfo.value.written is False
    assert excinfo.value.restored is False
    assert hosts.read_bytes() == original
