# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [ "Chain" ]

from fwpolicy import config
from fwpolicy.core.logger import log
from fwpolicy.core.rule import Rule


class Chain(object):
    """ Named, ordered list of rules with an optional default policy.

    rules and additions are None when the description does not mention them,
    which is different from an empty list: a chain with an empty rule list
    is not complete and will not be adopted during a merge. """

    def __init__(self, name, chain_info, table):
        self.name = name
        self.table = table
        log.debug3("init chain %s", self.path())

        # rules of this chain that declare addition points
        self.node_addition_points = [ ]

        policy = chain_info.get("policy")
        self.policy = None if policy == config.NO_POLICY else policy
        self.rules = self._build_rules(chain_info, "rules")
        self.additions = self._build_rules(chain_info, "additions")

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.path())

    def _build_rules(self, chain_info, data_type):
        if chain_info.get(data_type) is None:
            return None
        rules = [ ]
        for (index, rule_info) in enumerate(chain_info[data_type]):
            rule = Rule(rule_info, self)
            rule.set_position(index)
            rules.append(rule)
        return rules

    def path(self):
        return "%s.%s" % (self.table.path(), self.name)

    def output_policy(self):
        return config.NO_POLICY if self.policy is None else self.policy

    def render(self, comments=True):
        if self.rules is None:
            return [ ]
        lines = [ ]
        for rule in self.rules:
            lines.extend(rule.render(comments))
        return lines

    def render_all(self, comments=True):
        return [ ":%s %s" % (self.name, self.output_policy()) ] + \
            self.render(comments)

    def merge(self, other):
        # policy and rules are only replaced if the other chain has them,
        # rules as a whole
        if other.policy is not None:
            self.policy = other.policy
        if other.rules is not None:
            self.rules = other.rules
            self.node_addition_points = list(other.node_addition_points)

    def complete(self):
        if self.rules is None:
            return self.additions is None
        return len(self.rules) > 0

    def parse_rule(self, args):
        if self.rules is None:
            self.rules = [ ]
        # parsed rules come with trailing whitespace
        rule = Rule(args.strip(), self)
        rule.set_position(len(self.rules))
        self.rules.append(rule)

    def register_node_addition_point(self, rule, addition_name):
        if rule not in self.node_addition_points:
            self.node_addition_points.append(rule)
        self.table.register_node_addition_point(self.name)
        log.debug3("%s registered addition point %s", self.path(),
                   addition_name)

    def get_node_additions(self):
        if not self.additions:
            return None
        return self.additions

    def apply_additions(self, other_tables):
        for rule in self.node_addition_points:
            log.debug2("applying additions for %s", rule.path())
            rule.apply_additions(other_tables)
