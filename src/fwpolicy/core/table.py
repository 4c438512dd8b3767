# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [ "Table" ]

import re

from fwpolicy import config
from fwpolicy.core.base import DELETED, is_sentinel, sentinel_from_info
from fwpolicy.core.chain import Chain
from fwpolicy.core.logger import log
from fwpolicy import errors
from fwpolicy.errors import ParseError, ContractError

# Example: :INPUT DROP [0:0]
CHAIN_POLICY_REGEX = re.compile(r"^:(\S+)\s+(\S+)(\s+\[\d+:\d+\])?\s*$")
# Example: -A INPUT -m comment --comment "BEGIN: in-bound traffic"
CHAIN_RULE_REGEX = re.compile(r"^-A\s+(\S+)\s+(.+)")


class Table(object):
    # standard tables: nat, mangle, raw, filter

    def __init__(self, name, tables, chains_info=None):
        self.name = name
        self.tables = tables
        log.debug3("init table %s", self.name)

        # names of chains holding at least one addition point rule
        self.node_addition_points = set()
        self.chains = { }

        chains_info = chains_info or { }
        for chain_name in sorted(chains_info.keys()):
            chain_info = chains_info[chain_name]
            if isinstance(chain_info, dict):
                self.chains[chain_name] = Chain(chain_name, chain_info, self)
                continue
            sentinel = sentinel_from_info(chain_info)
            if sentinel is None:
                raise ParseError(errors.INVALID_INPUT,
                                 "don't know how to handle %s: %r" % \
                                 (chain_name, chain_info))
            self.chains[chain_name] = sentinel

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.name)

    def path(self):
        return self.name

    def chain_order(self):
        """ Chain names in rendering order: INPUT, FORWARD and OUTPUT first,
        the rest sorted. """
        order = [ name for name in config.PRIORITY_CHAINS
                  if name in self.chains ]
        order += sorted(name for name in self.chains if name not in order)
        return order

    def render(self, comments=True):
        policies = [ ]
        rules = [ ]
        for name in self.chain_order():
            chain = self.chains[name]
            if is_sentinel(chain):
                continue
            policies.append(":%s %s" % (name, chain.output_policy()))
            rules.extend(chain.render(comments))
        return policies + rules

    def merge(self, other):
        if not isinstance(other, Table):
            raise ContractError(errors.TYPE_MISMATCH,
                                "must merge another Table")
        for (chain_name, chain) in other.chains.items():
            log.debug2("merging chain %s.%s", self.name, chain_name)

            if chain is DELETED:
                self.chains.pop(chain_name, None)
                self.node_addition_points.discard(chain_name)
                continue
            if is_sentinel(chain):
                continue

            if chain_name in self.chains and \
               not is_sentinel(self.chains[chain_name]):
                self.chains[chain_name].merge(chain)
            elif chain.complete():
                self.chains[chain_name] = chain
            else:
                log.debug1("not adopting incomplete chain %s", chain.path())
                continue

            if self.chains[chain_name].node_addition_points:
                self.register_node_addition_point(chain_name)
            else:
                self.node_addition_points.discard(chain_name)

    def apply_additions(self, other_tables):
        log.debug3("node addition points of %s: %s", self.name,
                   sorted(self.node_addition_points))
        for name in self.chain_order():
            if name not in self.node_addition_points:
                continue
            log.debug2("looking for additions to chain %s.%s", self.name,
                       name)
            self.chains[name].apply_additions(other_tables)

    def register_node_addition_point(self, chain_name):
        self.node_addition_points.add(chain_name)

    def get_node_additions(self, chain_name):
        chain = self.chains.get(chain_name)
        if chain is None or is_sentinel(chain):
            return None
        return chain.get_node_additions()

    def parse(self, lines):
        """ Consume chain policy and rule lines, return the number of
        consumed lines. """
        position = 0
        while position < len(lines):
            line = lines[position]

            match = CHAIN_POLICY_REGEX.match(line)
            if match:
                self.chains[match.group(1)] = Chain(
                    match.group(1), { "policy": match.group(2) }, self)
                position += 1
                continue

            match = CHAIN_RULE_REGEX.match(line)
            if match:
                if match.group(1) not in self.chains:
                    raise ParseError(errors.INVALID_CHAIN,
                                     "unrecognized chain: %s" % \
                                     match.group(1))
                self.chains[match.group(1)].parse_rule(match.group(2))
                position += 1
                continue

            log.debug3("returning on unrecognized line: %s", line)
            break
        return position
