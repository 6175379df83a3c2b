"""Cloud-init seed rendering."""

import pytest
import yaml

from styx.cloudinit import render_cloud_init

KEY = "ssh-ed25519 AAAAC3Nza admin@example.com"
PACKAGE = "/srv/wheels/styx-1.0.0-py3-none-any.whl"


def test_seed_is_valid_cloud_config():
    seed = render_cloud_init(KEY, PACKAGE)
    assert seed.startswith("#cloud-config\n")

    document = yaml.safe_load(seed)
    assert document["hostname"] == "styx"
    assert "wireguard" in document["packages"]
    assert document["users"][0]["ssh_authorized_keys"] == [KEY]
    assert document["runcmd"][-1] == "styx setup"


def test_env_template_is_embedded_as_literal_block():
    seed = render_cloud_init(KEY, PACKAGE)
    assert "content: |" in seed
    files = yaml.safe_load(seed)["write_files"]
    assert 'export WG_PRIVATE_KEY=""' in files[0]["content"]
    assert files[0]["permissions"] == "0600"


def test_extra_ports_are_opened():
    document = yaml.safe_load(render_cloud_init(KEY, PACKAGE, extra_ports=["25565/tcp"]))
    firewall = document["runcmd"][0]
    assert "ufw allow 51820/udp" in firewall
    assert "ufw allow 25565/tcp" in firewall
    assert firewall.rstrip().endswith("ufw --force enable")


def test_ssh_key_is_required():
    with pytest.raises(ValueError):
        render_cloud_init("  ", PACKAGE)


def test_runcmd_installs_the_given_package_source():
    runcmd = yaml.safe_load(render_cloud_init(KEY, PACKAGE))["runcmd"]
    assert f"pip3 install --break-system-packages {PACKAGE}" in runcmd
    assert runcmd.index(f"pip3 install --break-system-packages {PACKAGE}") < runcmd.index("styx setup")


def test_package_source_is_shell_quoted():
    spec = "git+https://git.example.com/ops/styx.git#egg=styx"
    runcmd = yaml.safe_load(render_cloud_init(KEY, spec))["runcmd"]
    assert f"pip3 install --break-system-packages '{spec}'" in runcmd


def test_package_source_is_required():
    with pytest.raises(ValueError):
        render_cloud_init(KEY, " ")
