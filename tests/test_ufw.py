"""Managed block handling for /etc/ufw files."""

from styx.providers.ufw import extract_block, replace_block, set_forward_policy

BLOCK = "# BEGIN styx\n*nat\nCOMMIT\n# END styx\n"


def test_extract_block_missing():
    assert extract_block("*filter\nCOMMIT\n") is None


def test_replace_block_appends_once():
    text = replace_block("*filter\nCOMMIT\n", BLOCK)
    assert text == "*filter\nCOMMIT\n\n" + BLOCK
    assert replace_block(text, BLOCK) == text


def test_replace_block_swaps_content_in_place():
    original = "head\n\n" + BLOCK + "tail\n"
    updated = replace_block(original, BLOCK.replace("*nat", "*mangle"))
    assert updated == "head\n\n# BEGIN styx\n*mangle\nCOMMIT\n# END styx\ntail\n"


def test_set_forward_policy_replaces_existing():
    text = 'IPV6=yes\nDEFAULT_FORWARD_POLICY="ACCEPT"\nX=1\n'
    assert set_forward_policy(text) == 'IPV6=yes\nDEFAULT_FORWARD_POLICY="DROP"\nX=1\n'


def test_set_forward_policy_appends_when_absent():
    assert set_forward_policy("IPV6=yes") == 'IPV6=yes\nDEFAULT_FORWARD_POLICY="DROP"\n'
