# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [ "Rule" ]

import re

from fwpolicy import config
from fwpolicy.core.base import RULE_TYPES, CUSTOM_SERVICE_KEYS, \
    REQUIRES_PRIMITIVE
from fwpolicy.core.logger import log
from fwpolicy import errors
from fwpolicy.errors import ParseError, ModelError

# Example: -m comment --comment "BEGIN: in-bound traffic"
COMMENT_REGEX = re.compile(r'^-m\s+comment\s+--comment\s+"([^"]+)"\s*$')


def _port_matches(port1, port2):
    """ Best effort numeric port match, string match otherwise. """
    try:
        return int(str(port1)) == int(str(port2))
    except ValueError:
        return str(port1) == str(port2)


class Rule(object):
    """ A single declarative rule of a chain.

    A rule is built either from a literal fragment as found after
    "-A CHAIN" in iptables-save output, or from a description dict with one
    to three keys. Template types (custom_service, service, macro,
    interpolated, node_addition_points) are expanded once into child rules;
    a rule with children renders through them. """

    def __init__(self, rule_info, chain):
        log.debug3("received rule info %r", rule_info)

        if isinstance(rule_info, str):
            self.rule_hash = self._parse_string(rule_info)
        elif isinstance(rule_info, dict):
            self.rule_hash = dict(rule_info)
        else:
            raise ParseError(errors.INVALID_INPUT,
                             "don't know how to handle rule info: %r" % \
                             (rule_info,))

        self.chain = chain
        self.position = None
        self.children = [ ]

        self._handle_requires_primitive()

        if len(self.rule_hash) == 1:
            self.type = list(self.rule_hash.keys())[0]
        elif len(self.rule_hash) in (2, 3):
            self.type = "custom_service"
        else:
            raise ModelError(errors.INVALID_RULE,
                             "do not know how to handle rule %r" % \
                             (self.rule_hash,))

        if self.type not in RULE_TYPES:
            raise ModelError(errors.INVALID_TYPE,
                             "unrecognized rule type %s" % self.type)

        log.debug3("create rule %s", self.type)

        handler = getattr(self, "_handle_%s" % self.type, None)
        if handler is not None:
            handler()

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.type,
                               self.rule_hash)

    def _parse_string(self, rule_info):
        match = COMMENT_REGEX.match(rule_info)
        if match:
            return { "comment": match.group(1) }
        return { "raw": rule_info }

    def _config(self):
        _config = self.chain.table.tables.config
        if _config is None:
            raise ModelError(errors.MISSING_CONFIG,
                             "rule %r needs a configuration" % \
                             (self.rule_hash,))
        return _config

    def add_child(self, rule_info):
        self.children.append(Rule(rule_info, self.chain))

    def set_position(self, number):
        self.position = number

    def path(self):
        return "%s.%s" % (self.chain.path(), self.position)

    # expansion

    def _handle_requires_primitive(self):
        self.requires_primitive = None
        if REQUIRES_PRIMITIVE not in self.rule_hash:
            return
        self.requires_primitive = self.rule_hash.pop(REQUIRES_PRIMITIVE)
        if not self._config().has_primitive(self.requires_primitive):
            log.debug2("primitive %s is not available, rule is empty",
                       self.requires_primitive)
            self.rule_hash = { "empty": None }

    def _handle_custom_service(self):
        if "service_name" not in self.rule_hash:
            raise ModelError(errors.MISSING_NAME,
                             "missing service name: %r" % (self.rule_hash,))

        service_name = self.rule_hash["service_name"]
        port = None
        services = [ ]
        for key in sorted(self.rule_hash.keys()):
            if key == "service_name":
                continue
            if key not in CUSTOM_SERVICE_KEYS:
                raise ModelError(errors.INVALID_SERVICE_KEY,
                                 "unknown service key: %s" % key)
            value = self.rule_hash[key]
            services.append({ key: value })
            # one port, or the same port for every protocol
            if len(services) == 1:
                port = value
            elif port is not None and not _port_matches(value, port):
                port = None

        if port is None:
            self.add_child({ "comment": "_ %s" % service_name })
        else:
            self.add_child({ "comment": "_ Port %s - %s" % (port,
                                                            service_name) })
        for service in services:
            self.add_child(service)

    def _handle_interpolated(self):
        arg = self.rule_hash["interpolated"]
        log.debug2("interpolating %s", arg)
        for rule_info in self._config().interpolation_children(arg):
            self.add_child(rule_info)

    def _handle_macro(self):
        macro = self._config().get_macro(self.rule_hash["macro"])
        log.debug2("macro %s", macro.name)
        for rule_info in macro.children:
            self.add_child(rule_info)

    def _handle_service(self):
        service = self._config().get_service(self.rule_hash["service"])
        log.debug2("service %s", service.name)
        for rule_info in service.children:
            self.add_child(rule_info)

    def _handle_node_addition_points(self):
        self.add_child({ "empty": None })
        for addition_name in self.rule_hash["node_addition_points"]:
            self.chain.register_node_addition_point(self, addition_name)

    # rendering

    def _args(self):
        if self.type == "comment":
            return '-m comment --comment "%s"' % self.rule_hash["comment"]
        if self.type == "raw":
            return self.rule_hash["raw"]
        if self.type in ("service_tcp", "service_udp"):
            proto = self.type[len("service_"):]
            return "-p %s -m %s --sport %s --dport %s -m state --state %s " \
                "-j %s" % (proto, proto, config.EPHEMERAL_PORTS,
                           self.rule_hash[self.type], config.SERVICE_STATES,
                           config.SERVICE_TARGET)
        if self.type == "ulog":
            args = '-m limit --limit %s --limit-burst %d -j ULOG ' \
                '--ulog-prefix "%s:"' % (config.ULOG_LIMIT,
                                         config.ULOG_LIMIT_BURST,
                                         self.chain.name)
            if self.rule_hash["ulog"] == config.ULOG_TCP_RESTRICTION:
                args = "%s %s" % (config.ULOG_TCP_RESTRICTION, args)
            return args
        return ""

    def render(self, comments=True):
        if self.type == "empty":
            return [ ]
        if self.type == "comment" and not comments:
            return [ ]

        if self.children:
            rules = [ ]
            for child in self.children:
                rules.extend(child.render(comments))
            return rules

        args = self._args()
        if not args:
            raise ModelError(errors.EMPTY_RULE,
                             "rule %s of type %s has nothing to render" % \
                             (self.path(), self.type))
        return [ "-A %s %s" % (self.chain.name, args) ]

    def apply_additions(self, other_tables):
        """ Append the additions other_tables registers for the addition
        points of this rule. """
        for addition_name in self.rule_hash["node_addition_points"]:
            other_rules = other_tables.get_node_additions(
                self.chain.table.name, addition_name)
            if other_rules is None:
                continue
            log.debug2("applying additions at %s", addition_name)
            for other_rule in other_rules:
                self.add_child(other_rule.rule_hash)
