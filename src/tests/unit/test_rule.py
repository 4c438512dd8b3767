# SPDX-License-Identifier: GPL-2.0-or-later

import pytest

import fwpolicy.errors
from fwpolicy.core.logger import log
from fwpolicy.core.rule import Rule
from fwpolicy.core.tables import Tables

from tests.unit import helpers

###############################################################################


def _chain(config=None, chain_name="chain1"):
    tables = Tables({
        "table1": {
            chain_name: { "policy": "ACCEPT", "rules": [ "-j ACCEPT" ] }
        }
    }, config)
    return tables.tables["table1"].chains[chain_name]


def _render(rule_info, config=None, comments=True, chain_name="chain1"):
    return Rule(rule_info, _chain(config, chain_name)).render(comments)


def test_position():
    chain = _chain()
    assert chain.rules[0].position == 0
    assert Rule({ "raw": "-j ACCEPT" }, chain).position is None


def test_raw_rule():
    assert _render({ "raw": "-j ACCEPT" }) == [ "-A chain1 -j ACCEPT" ]
    rule = Rule("-p tcp -j DROP", _chain())
    assert rule.type == "raw"
    assert rule.rule_hash == { "raw": "-p tcp -j DROP" }


def test_comment_from_text():
    rule = Rule('-m comment --comment "BEGIN: in-bound traffic"', _chain())
    assert rule.rule_hash == { "comment": "BEGIN: in-bound traffic" }
    assert rule.type == "comment"
    assert rule.render(False) == [ ]
    assert rule.render() == [
        '-A chain1 -m comment --comment "BEGIN: in-bound traffic"' ]


def test_commented_rule_stays_raw():
    rule = Rule('-m comment --comment "ssh" -j ACCEPT', _chain())
    assert rule.type == "raw"
    assert rule.render(False) == [
        '-A chain1 -m comment --comment "ssh" -j ACCEPT' ]


def test_service_tcp_and_udp():
    assert _render({ "service_tcp": 22 }) == [
        "-A chain1 -p tcp -m tcp --sport 1024:65535 --dport 22 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT" ]
    assert _render({ "service_udp": "53" }) == [
        "-A chain1 -p udp -m udp --sport 1024:65535 --dport 53 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT" ]


def test_ulog():
    assert _render({ "ulog": None }, chain_name="INPUT") == [
        '-A INPUT -m limit --limit 1/sec --limit-burst 2 -j ULOG '
        '--ulog-prefix "INPUT:"' ]
    assert _render({ "ulog": "-p tcp" }, chain_name="INPUT") == [
        '-A INPUT -p tcp -m limit --limit 1/sec --limit-burst 2 -j ULOG '
        '--ulog-prefix "INPUT:"' ]


def test_empty():
    rule = Rule({ "empty": None }, _chain())
    assert rule.children == [ ]
    assert rule.render() == [ ]


def test_custom_service_same_port():
    rule = Rule({ "service_name": "foo", "service_tcp": 80,
                  "service_udp": 80 }, _chain())
    assert rule.type == "custom_service"
    assert [ child.type for child in rule.children ] == [
        "comment", "service_tcp", "service_udp" ]
    assert rule.render() == [
        '-A chain1 -m comment --comment "_ Port 80 - foo"',
        "-A chain1 -p tcp -m tcp --sport 1024:65535 --dport 80 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT",
        "-A chain1 -p udp -m udp --sport 1024:65535 --dport 80 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT",
    ]


def test_custom_service_port_coercion():
    lines = _render({ "service_name": "foo", "service_tcp": "80",
                      "service_udp": 80 })
    assert lines[0] == '-A chain1 -m comment --comment "_ Port 80 - foo"'


def test_custom_service_different_ports():
    lines = _render({ "service_name": "foo", "service_tcp": 80,
                      "service_udp": 90 })
    assert lines[0] == '-A chain1 -m comment --comment "_ foo"'
    assert len(lines) == 3
    assert _render({ "service_name": "foo", "service_tcp": 80,
                     "service_udp": 90 }, comments=False) == lines[1:]


def test_custom_service_single_port():
    assert _render({ "service_name": "bar", "service_udp": 123 }) == [
        '-A chain1 -m comment --comment "_ Port 123 - bar"',
        "-A chain1 -p udp -m udp --sport 1024:65535 --dport 123 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT",
    ]


def test_custom_service_errors():
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "service_tcp": 80, "service_udp": 80 }, _chain())
    assert e.value.code == fwpolicy.errors.MISSING_NAME

    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "service_name": "foo", "raw": "-j ACCEPT" }, _chain())
    assert e.value.code == fwpolicy.errors.INVALID_SERVICE_KEY


def test_invalid_rules():
    with pytest.raises(fwpolicy.errors.ParseError):
        Rule(1, _chain())
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ }, _chain())
    assert e.value.code == fwpolicy.errors.INVALID_RULE
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "a": 1, "b": 2, "c": 3, "d": 4 }, _chain())
    assert e.value.code == fwpolicy.errors.INVALID_RULE
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "bogus": 1 }, _chain())
    assert e.value.code == fwpolicy.errors.INVALID_TYPE


def test_invalid_rule_with_debug_logging():
    level = log.getDebugLogLevel()
    log.setDebugLogLevel(log.DEBUG_MAX)
    try:
        with pytest.raises(fwpolicy.errors.ParseError) as e:
            Tables({ "filter": { "INPUT": { "rules": [ ("-j", "ACCEPT") ] } } })
        assert e.value.code == fwpolicy.errors.INVALID_INPUT
        with pytest.raises(fwpolicy.errors.ParseError):
            Rule(("-j", "ACCEPT", "extra"), _chain())
    finally:
        log.setDebugLogLevel(level)


def test_empty_fragment_does_not_render():
    rule = Rule({ "raw": "" }, _chain())
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        rule.render()
    assert e.value.code == fwpolicy.errors.EMPTY_RULE


def test_templates_need_config():
    for rule_info in [ { "service": "ssh" }, { "macro": "web" },
                       { "interpolated": "-s <% networks.dns %>" },
                       { "requires_primitive": "iptables.ulog",
                         "ulog": None } ]:
        with pytest.raises(fwpolicy.errors.ModelError) as e:
            Rule(rule_info, _chain())
        assert e.value.code == fwpolicy.errors.MISSING_CONFIG


def test_requires_primitive():
    config = helpers.sample_config()
    rule_info = { "requires_primitive": "iptables.ulog", "raw": "-j LOG" }
    rule = Rule(rule_info, _chain(config))
    assert rule.type == "raw"
    assert rule.requires_primitive == "iptables.ulog"
    assert rule.render() == [ "-A chain1 -j LOG" ]
    # the description passed in is left alone
    assert "requires_primitive" in rule_info

    rule = Rule({ "requires_primitive": "iptables.nflog", "raw": "-j LOG" },
                _chain(config))
    assert rule.type == "empty"
    assert rule.render() == [ ]


def test_service():
    rule = Rule({ "service": "ssh" }, _chain(helpers.sample_config()))
    assert rule.render() == [
        '-A chain1 -m comment --comment "_ Port 22 - ssh"',
        "-A chain1 -p tcp -m tcp --sport 1024:65535 --dport 22 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT",
    ]
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "service": "telnet" }, _chain(helpers.sample_config()))
    assert e.value.code == fwpolicy.errors.INVALID_SERVICE


def test_macro_expands_recursively():
    rule = Rule({ "macro": "web" }, _chain(helpers.sample_config()))
    assert len(rule.children) == 1
    assert rule.children[0].type == "custom_service"
    assert rule.render(False) == [
        "-A chain1 -p tcp -m tcp --sport 1024:65535 --dport 80 "
        "-m state --state NEW,ESTABLISHED -j ACCEPT",
    ]
    assert _render({ "macro": "allow_loopback" },
                   helpers.sample_config()) == [
        '-A chain1 -m comment --comment "_ loopback"',
        "-A chain1 -i lo -j ACCEPT",
    ]
    with pytest.raises(fwpolicy.errors.ModelError) as e:
        Rule({ "macro": "nope" }, _chain(helpers.sample_config()))
    assert e.value.code == fwpolicy.errors.INVALID_MACRO


def test_interpolated():
    assert _render({ "interpolated": "-s <% networks.office %> -j ACCEPT" },
                   helpers.sample_config()) == [
        "-A chain1 -s 10.0.0.0/8 -j ACCEPT",
        "-A chain1 -s 192.168.0.0/16 -j ACCEPT",
    ]


def test_node_addition_points_placeholder():
    chain = _chain()
    rule = Rule({ "node_addition_points": [ "chain1" ] }, chain)
    assert [ child.type for child in rule.children ] == [ "empty" ]
    assert rule.render() == [ ]
    assert rule in chain.node_addition_points
    assert "chain1" in chain.table.node_addition_points
