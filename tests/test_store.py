"""Configuration store and the immutable configuration model."""

import stat

import pytest
from pydantic import ValidationError

from styx.core.errors import PreconditionError
from styx.core.project.validator import REQUIRED_KEYS, build_config, missing_required
from styx.store import EnvStore, ensure_private_key, wg_genkey


def test_load_reads_exported_quoted_values(env_file):
    values = EnvStore(env_file).load()
    assert values["WG_CLIENT_IP"] == "10.0.0.2"
    assert values["WG_PRIVATE_KEY"] == ""


def test_load_config_builds_model(env_file):
    config = EnvStore(env_file).load_config()
    assert config.domain_name == "example.com"
    assert config.wg_private_key is None
    assert config.wg_listen_port == 51820
    assert config.wg_interface == "wg0"


def test_missing_required_lists_every_empty_key():
    values = {key: "x" for key in REQUIRED_KEYS}
    values["DOMAIN_NAME"] = "   "
    del values["NPM_ADMIN_EMAIL"]
    assert missing_required(values) == ["DOMAIN_NAME", "NPM_ADMIN_EMAIL"]


def test_build_config_rejects_invalid_optional_value():
    values = {key: "x" for key in REQUIRED_KEYS}
    values["WG_LISTEN_PORT"] = "not-a-port"
    with pytest.raises(PreconditionError) as exc:
        build_config(values)
    assert "WG_LISTEN_PORT" in exc.value.missing


def test_config_is_frozen(config):
    with pytest.raises(ValidationError):
        config.domain_name = "other.example"


def test_with_private_key_returns_copy(config):
    updated = config.with_private_key("NEW")
    assert updated.wg_private_key == "NEW"
    assert config.wg_private_key == "PRIVKEY"


def test_set_rewrites_existing_line(env_file):
    store = EnvStore(env_file)
    store.set("WG_PRIVATE_KEY", "abc+/=")

    text = env_file.read_text()
    assert text.count("WG_PRIVATE_KEY") == 1
    assert "export WG_PRIVATE_KEY=" in text
    assert store.load()["WG_PRIVATE_KEY"] == "abc+/="
    assert store.load()["NPM_DATABASE_PASSWORD"] == "dbpass"


def test_ensure_private_key_persists_generated_key(env_file):
    store = EnvStore(env_file)
    config = store.load_config()

    resolved = ensure_private_key(store, config, keygen=lambda: "GEN")

    assert resolved.wg_private_key == "GEN"
    assert config.wg_private_key is None
    assert store.load()["WG_PRIVATE_KEY"] == "GEN"


def test_wg_genkey_uses_runner(host):
    assert wg_genkey(host) == "GENERATEDKEY="
    assert host.commands == [["wg", "genkey"]]


def test_wg_genkey_failure_is_precondition_error():
    with pytest.raises(PreconditionError):
        wg_genkey(lambda command, **kwargs: (False, "", "wg: not found"))


def test_missing_store_file(tmp_path):
    with pytest.raises(PreconditionError):
        EnvStore(tmp_path / "nope.sh").load()


def test_write_template_is_owner_only(tmp_path):
    store = EnvStore(tmp_path / "styx_env.sh")
    assert store.write_template()
    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600
    assert not store.write_template()
    assert missing_required(store.load()) == [k for k in REQUIRED_KEYS if k != "DOMAIN_NAME"]
