# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [ "Tables" ]

import re

from fwpolicy.core.base import DELETED, is_sentinel, sentinel_from_info
from fwpolicy.core.logger import log
from fwpolicy.core.table import Table
from fwpolicy import errors
from fwpolicy.errors import ParseError, ContractError

# Example: *filter
TABLE_REGEX = re.compile(r"^\*(\S+)\s*$")
# Example: # Generated by iptables-save v1.4.4 on Wed Sep 26 18:38:44 2012
COMMENT_REGEX = re.compile(r"^#")


class Tables(object):
    """ All tables of a firewall policy, with their chains and rules.

    input is either iptables-save text or a declarative dict
    { table: { chain: { "policy": ..., "rules": [...], "additions": [...] } } }
    where None defers a table or chain to the other side of a merge and
    False deletes it. config is consulted while expanding rule templates. """

    def __init__(self, input, config=None):
        self.config = config
        self.tables = { }
        log.debug3("init tables")

        if isinstance(input, dict):
            for table_name in sorted(input.keys()):
                table_info = input[table_name]
                sentinel = sentinel_from_info(table_info)
                if sentinel is not None:
                    self.tables[table_name] = sentinel
                elif isinstance(table_info, dict):
                    self.tables[table_name] = Table(table_name, self,
                                                    table_info)
                else:
                    raise ParseError(errors.INVALID_INPUT,
                                     "don't know how to handle %s: %r" % \
                                     (table_name, table_info))
        elif isinstance(input, str):
            self.parse(input.splitlines())
        else:
            raise ParseError(errors.INVALID_INPUT,
                             "don't know how to handle input: %r" % (input,))

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, sorted(self.tables))

    def render(self, comments=True):
        lines = [ ]
        for name in sorted(self.tables.keys()):
            table = self.tables[name]
            if is_sentinel(table):
                continue
            lines.append("*%s" % name)
            lines.extend(table.render(comments))
            lines.append("COMMIT")
        return lines

    def as_text(self, comments=True):
        return "".join("%s\n" % line for line in self.render(comments))

    def merge(self, other):
        if type(other) is not Tables:
            raise ContractError(errors.TYPE_MISMATCH,
                                "must merge another Tables")
        for (table_name, table) in other.tables.items():
            log.debug2("merging table %s", table_name)

            if table is DELETED:
                log.debug2("deleting table %s", table_name)
                self.tables.pop(table_name, None)
                continue
            if is_sentinel(table):
                continue

            if table_name in self.tables and \
               not is_sentinel(self.tables[table_name]):
                self.tables[table_name].merge(table)
            else:
                self.tables[table_name] = table

        # splice in the rules other contributes to addition points
        for name in sorted(self.tables.keys()):
            table = self.tables[name]
            if is_sentinel(table):
                continue
            log.debug2("applying additions to table %s", name)
            table.apply_additions(other)

    def get_node_additions(self, table_name, chain_name):
        log.debug3("finding additions for %s.%s", table_name, chain_name)
        table = self.tables.get(table_name)
        if table is None or is_sentinel(table):
            return None
        return table.get_node_additions(chain_name)

    def parse(self, lines):
        position = 0
        while position < len(lines):
            line = lines[position]
            position += 1

            if line.strip() == "" or COMMENT_REGEX.match(line) or \
               line.strip() == "COMMIT":
                continue

            match = TABLE_REGEX.match(line)
            if match:
                table = Table(match.group(1), self)
                self.tables[table.name] = table
                position += table.parse(lines[position:])
                continue

            raise ParseError(errors.UNHANDLED_LINE, line)

        if not self.tables:
            raise ParseError(errors.NO_TABLES, "no tables found")
