# SPDX-License-Identifier: GPL-2.0-or-later

import textwrap

from fwpolicy.core.registry import Configuration
from fwpolicy.core.tables import Tables


def dedent(text):
    return textwrap.dedent(text).lstrip("\n")


def parse(text, config=None):
    return Tables(dedent(text), config)


def parse_table(text, table_name):
    return parse(text).tables[table_name]


def parse_chain(text, table_name, chain_name):
    return parse_table(text, table_name).chains[chain_name]


def sample_config():
    return Configuration(
        primitives={
            "iptables": { "ulog": True },
            "networks": {
                "office": [ "10.0.0.0/8", "192.168.0.0/16" ],
                "dns": "10.1.1.1",
            },
        },
        macros={
            "allow_loopback": [
                { "comment": "_ loopback" },
                "-i lo -j ACCEPT",
            ],
            "web": [
                { "service_name": "http", "service_tcp": 80 },
            ],
        },
        services={
            "ssh": [
                { "comment": "_ Port 22 - ssh" },
                { "service_tcp": 22 },
            ],
        },
    )
