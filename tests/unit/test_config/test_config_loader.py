# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import logging

import pytest

from xenvbd.config.loader import Config
from xenvbd.config.models import XenServerConfig
from xenvbd.core.exceptions import ConfigError

log = logging.getLogger("xenvbd.test.config")


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_load_many_deep_merges_later_wins(tmp_path):
    a = _write(tmp_path / "a.yaml", "connection:\n  url: https://a\n  username: root\nvm: one\n")
    b = _write(tmp_path / "b.yaml", "connection:\n  url: https://b\n")
    conf = Config.load_many(log, [a, b])
    assert conf["connection"] == {"url": "https://b", "username": "root"}
    assert conf["vm"] == "one"


def test_expand_configs_directory_sorted(tmp_path):
    _write(tmp_path / "20.yml", "a: 2\n")
    _write(tmp_path / "10.yaml", "a: 1\n")
    _write(tmp_path / "notes.txt", "ignored\n")
    paths = Config.expand_configs(log, [str(tmp_path)])
    assert [p.name for p in paths] == ["10.yaml", "20.yml"]


def test_empty_file_is_empty_mapping(tmp_path):
    assert Config.load_file(log, _write(tmp_path / "e.yaml", "")) == {}


@pytest.mark.parametrize("text", ["- a\n- b\n", "key: [unclosed\n"])
def test_bad_yaml_raises_config_error(tmp_path, text):
    with pytest.raises(ConfigError):
        Config.load_file(log, _write(tmp_path / "bad.yaml", text))


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read config"):
        Config.load_file(log, tmp_path / "nope.yaml")


def test_apply_env_only_fills_empty_fields():
    env = {"XENSERVER_URL": "https://env", "XENSERVER_USERNAME": "envuser", "XENSERVER_PASSWORD": "pw"}
    conf = Config.apply_env({"connection": {"url": "https://file"}}, env)
    assert conf["connection"] == {"url": "https://file", "username": "envuser", "password": "pw"}


def test_from_mapping_vm_string_is_uuid():
    cfg = XenServerConfig.from_mapping({"vm": "abc", "hard_drive": [{"vdi_uuid": "d"}]})
    assert cfg.vm.uuid == "abc"
    assert cfg.vm.name is None
    assert cfg.hard_drive == [{"vdi_uuid": "d"}]
    assert cfg.cdrom == []


@pytest.mark.parametrize(
    "conf",
    [
        {"connection": "https://x"},
        {"vm": ["a"]},
        {"hard_drive": {"vdi_uuid": "d"}},
        {"cdrom": ["iso"]},
    ],
)
def test_from_mapping_rejects_bad_shapes(conf):
    with pytest.raises(ConfigError):
        XenServerConfig.from_mapping(conf)


def test_connection_validate_and_password_env(monkeypatch):
    cfg = XenServerConfig.from_mapping(
        {"connection": {"url": "https://x", "username": "root", "password_env": "XS_PW_TEST"}}
    )
    cfg.connection.validate()

    monkeypatch.delenv("XS_PW_TEST", raising=False)
    with pytest.raises(ConfigError, match="XS_PW_TEST"):
        cfg.connection.resolve_password()

    monkeypatch.setenv("XS_PW_TEST", "s3cret")
    assert cfg.connection.resolve_password() == "s3cret"


def test_direct_password_wins(monkeypatch):
    monkeypatch.setenv("XS_PW_TEST", "from-env")
    cfg = XenServerConfig.from_mapping({"connection": {"password": "direct", "password_env": "XS_PW_TEST"}})
    assert cfg.connection.resolve_password() == "direct"


def test_missing_connection_and_vm_fields():
    cfg = XenServerConfig.from_mapping({})
    with pytest.raises(ConfigError, match="connection.url"):
        cfg.connection.validate()
    with pytest.raises(ConfigError, match="password"):
        cfg.connection.resolve_password()
    with pytest.raises(ConfigError, match="vm.uuid or vm.name"):
        cfg.vm.validate()


def test_apply_env_keeps_password_env_indirection():
    env = {"XENSERVER_PASSWORD": "generic", "XENSERVER_URL": "https://env"}
    conf = Config.apply_env({"connection": {"password_env": "XS_PW_TEST"}}, env)
    assert "password" not in conf["connection"]
    assert conf["connection"]["url"] == "https://env"
