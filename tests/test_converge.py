"""Convergence runs against real providers, a fake host and a temporary root."""

import json
import stat

import pytest
from dotenv import dotenv_values

from styx.core.errors import ConfigError, PreconditionError
from styx.core.runtime.state import Action
from styx.providers.ufw import extract_block
from styx.templates import UFW_BLOCK_BEGIN


def _actions(result):
    return {r.name: r.target_action for r in result.plan.resources}


def test_example_scenario(make_provisioner, env_file, root):
    result = make_provisioner().run()

    assert result.success
    wg_conf = (root / "etc/wireguard/wg0.conf").read_text()
    assert "Address = 10.0.0.2/24" in wg_conf
    assert "PublicKey = ABC" in wg_conf
    assert "PrivateKey = GENERATEDKEY=" in wg_conf
    assert stat.S_IMODE((root / "etc/wireguard/wg0.conf").stat().st_mode) == 0o600

    compose = (root / "opt/npm/docker-compose.yml").read_text()
    assert 'MYSQL_PASSWORD: "dbpass"' in compose
    assert (root / "opt/npm/data").is_dir()
    assert (root / "opt/npm/letsencrypt").is_dir()

    assert dotenv_values(env_file)["WG_PRIVATE_KEY"] == "GENERATEDKEY="
    assert all(action == Action.CREATE for action in _actions(result).values())
    assert result.report.started_stack


def test_second_run_is_a_no_op(make_provisioner, host):
    make_provisioner().run()
    mutations_after_first = len(host.mutations())

    second = make_provisioner().run()

    assert second.success
    assert set(_actions(second).values()) == {Action.SKIP}
    assert second.report.changed == []
    assert not second.report.started_stack
    assert len(host.mutations()) == mutations_after_first


def test_private_key_generated_once(make_provisioner, env_file):
    calls = []

    def keygen():
        calls.append(1)
        return "KEY-%d" % len(calls)

    make_provisioner(keygen=keygen).run()
    second = make_provisioner(keygen=keygen).run()

    assert len(calls) == 1
    assert second.config.wg_private_key == "KEY-1"
    assert dotenv_values(env_file)["WG_PRIVATE_KEY"] == "KEY-1"


def test_existing_private_key_is_not_regenerated(make_provisioner, env_file):
    env_file.write_text(env_file.read_text().replace('WG_PRIVATE_KEY=""', 'WG_PRIVATE_KEY="KEEPME"'))

    def keygen():
        raise AssertionError("keygen must not run when a key is set")

    result = make_provisioner(keygen=keygen).run()
    assert result.config.wg_private_key == "KEEPME"


def test_changed_database_password_updates_only_compose(make_provisioner, env_file, host, root):
    make_provisioner().run()
    env_file.write_text(env_file.read_text().replace('"dbpass"', '"newpass"'))
    host.commands.clear()

    result = make_provisioner().run()

    actions = _actions(result)
    assert actions["compose"] == Action.UPDATE
    assert [n for n, a in actions.items() if a != Action.SKIP] == ["compose"]
    assert 'MYSQL_PASSWORD: "newpass"' in (root / "opt/npm/docker-compose.yml").read_text()
    assert ["systemctl", "restart", "nginx-proxy-manager"] in host.commands
    assert result.report.started_stack


@pytest.mark.parametrize("relative, old, new, resource", [
    ("etc/wireguard/wg0.conf", "PublicKey = ABC", "PublicKey = OTHER", "wireguard"),
    ("opt/npm/docker-compose.yml", '"dbpass"', '"leaked"', "compose"),
    ("etc/ufw/before.rules", "10.0.0.0/24", "10.9.0.0/24", "firewall"),
    ("etc/systemd/system/nginx-proxy-manager.service", "/usr/bin/podman-compose", "/opt/bin/podman-compose", "proxy-unit"),
    ("etc/sysctl.d/99-ip-forward.conf", "ip_forward=1", "ip_forward=0", "ip-forwarding"),
])
def test_stale_artifact_is_classified_update(make_provisioner, root, relative, old, new, resource):
    provisioner = make_provisioner()
    provisioner.run()
    artifact = root / relative
    artifact.write_text(artifact.read_text().replace(old, new))

    plan = provisioner.plan(provisioner.store.load_config())

    assert _actions_of(plan)[resource] == Action.UPDATE


def _actions_of(plan):
    return {r.name: r.target_action for r in plan.resources}


def test_stopped_wireguard_is_restarted(make_provisioner, host):
    make_provisioner().run()
    host.active.discard("wg-quick@wg0")

    result = make_provisioner().run()

    assert _actions(result)["wireguard"] == Action.UPDATE
    assert "wg-quick@wg0" in host.active


def test_firewall_block_is_replaced_not_appended(make_provisioner, env_file, root):
    rules = root / "etc/ufw/before.rules"
    rules.parent.mkdir(parents=True)
    rules.write_text("*filter\n:ufw-before-input - [0:0]\nCOMMIT\n")
    (root / "etc/default").mkdir(parents=True)
    (root / "etc/default/ufw").write_text('IPV6=yes\nDEFAULT_FORWARD_POLICY="ACCEPT"\n')

    make_provisioner().run()
    env_file.write_text(env_file.read_text().replace("10.0.0.0/24", "10.1.0.0/24"))
    make_provisioner().run()

    text = rules.read_text()
    assert text.startswith("*filter\n")
    assert text.count(UFW_BLOCK_BEGIN) == 1
    assert "-A POSTROUTING -s 10.1.0.0/24 -o eth0 -j MASQUERADE" in extract_block(text)
    assert (root / "etc/default/ufw").read_text() == 'IPV6=yes\nDEFAULT_FORWARD_POLICY="DROP"\n'


def test_missing_required_key_aborts_before_mutation(make_provisioner, env_file, host, root):
    env_file.write_text(env_file.read_text().replace('"ABC"', '""'))

    with pytest.raises(PreconditionError) as exc:
        make_provisioner().run()

    assert exc.value.missing == ["WG_PEER_PUBLIC_KEY"]
    assert host.commands == []
    assert list(root.iterdir()) == []
    assert dotenv_values(env_file)["WG_PRIVATE_KEY"] == ""


def test_missing_tool_aborts_before_mutation(make_provisioner, host):
    lookup = lambda tool: None if tool in ("podman-compose", "ufw") else f"/usr/bin/{tool}"

    with pytest.raises(PreconditionError) as exc:
        make_provisioner(tool_lookup=lookup).run()

    assert exc.value.missing == ["podman-compose", "ufw"]
    assert host.commands == []


def test_missing_env_file_is_a_precondition_error(make_provisioner, env_file):
    env_file.unlink()
    with pytest.raises(PreconditionError):
        make_provisioner().run()


def test_resource_failure_stops_dependent_steps(make_provisioner, host, root):
    host.fail_on = ["ufw", "reload"]

    result = make_provisioner().run()

    assert not result.success
    assert result.report.failed.resource == "firewall"
    assert result.report.changed == ["wireguard", "ip-forwarding"]
    assert ["podman", "network", "create", "npm-network"] not in host.commands
    assert not (root / "opt/npm/docker-compose.yml").exists()
    # applied resources are left in place
    assert (root / "etc/wireguard/wg0.conf").exists()


def test_corrupt_fingerprint_store_does_not_abort_the_run(make_provisioner, tmp_path, root):
    store = tmp_path / "state" / "fingerprints.json"
    store.parent.mkdir()
    store.write_text("{not json")

    result = make_provisioner().run()

    assert result.success
    assert result.report.changed[0] == "wireguard"
    assert (root / "opt/npm/docker-compose.yml").exists()
    assert set(json.loads(store.read_text())) == set(result.report.changed)


def test_unwritable_fingerprint_store_does_not_abort_the_run(make_provisioner, tmp_path, root):
    # state root is a file: mkdir of the store directory fails
    (tmp_path / "state").write_text("")

    result = make_provisioner().run()

    assert result.success
    assert (root / "etc/systemd/system/nginx-proxy-manager.service").exists()


def test_unreadable_artifact_is_a_config_error_before_mutation(make_provisioner, host, root):
    conf = root / "etc/wireguard/wg0.conf"
    conf.parent.mkdir(parents=True)
    conf.write_bytes(b"\xff\xfe[Interface]\n")

    with pytest.raises(ConfigError) as exc:
        make_provisioner().run()

    assert "wg0.conf" in str(exc.value)
    assert host.mutations() == []
