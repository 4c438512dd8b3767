# SPDX-License-Identifier: GPL-2.0-or-later

"""Structural comparison of two policies.

Each comparison runs lazily on the first query and keeps its result until
include_comments() or ignore_comments() is called again.
"""

__all__ = [ "TablesComparison", "TableComparison", "ChainComparison",
            "lcs_patch" ]

from fwpolicy import config
from fwpolicy.core.base import is_sentinel
from fwpolicy.core.chain import Chain
from fwpolicy.core.logger import log
from fwpolicy.core.table import Table
from fwpolicy.core.tables import Tables
from fwpolicy import errors
from fwpolicy.errors import ContractError


def lcs_patch(seq1, seq2):
    """ Minimal edit script between two sequences.

    Returns (removed, added): removed maps positions in seq1 to the items
    that are not part of a longest common subsequence, added does the same
    for seq2. """
    n = len(seq1)
    m = len(seq2)

    # lengths[i][j] is the LCS length of seq1[i:] and seq2[j:]
    lengths = [ [ 0 ] * (m + 1) for i in range(n + 1) ]
    for i in range(n - 1, -1, -1):
        for j in range(m - 1, -1, -1):
            if seq1[i] == seq2[j]:
                lengths[i][j] = lengths[i+1][j+1] + 1
            else:
                lengths[i][j] = max(lengths[i+1][j], lengths[i][j+1])

    removed = { }
    added = { }
    i = j = 0
    while i < n and j < m:
        if seq1[i] == seq2[j]:
            i += 1
            j += 1
        elif lengths[i+1][j] >= lengths[i][j+1]:
            removed[i] = seq1[i]
            i += 1
        else:
            added[j] = seq2[j]
            j += 1
    for i in range(i, n):
        removed[i] = seq1[i]
    for j in range(j, m):
        added[j] = seq2[j]
    return (removed, added)


class _Comparison(object):
    def __init__(self):
        self.including_comments = config.DEFAULT_INCLUDE_COMMENTS
        self._compared = False
        self._equal = True

    def include_comments(self):
        self.including_comments = True
        self._compared = False

    def ignore_comments(self):
        self.including_comments = False
        self._compared = False

    def compare(self):
        if self._compared:
            return
        self._compare()
        self._compared = True

    def _compare(self):
        raise NotImplementedError("_Comparison._compare is abstract")

    def _child_comparison(self, comparison):
        if self.including_comments:
            comparison.include_comments()
        else:
            comparison.ignore_comments()
        return comparison

    def is_equal(self):
        self.compare()
        return self._equal


class TablesComparison(_Comparison):
    def __init__(self, tables1, tables2):
        super(TablesComparison, self).__init__()
        if not isinstance(tables1, Tables) or not isinstance(tables2, Tables):
            raise ContractError(errors.TYPE_MISMATCH,
                                "must provide two tables")
        self.tables1 = tables1
        self.tables2 = tables2

    def _compare(self):
        tables1 = self.tables1.tables
        tables2 = self.tables2.tables

        # sentinel tables only come from declarative input and mean
        # "use the other side", so they never differ
        self._only_in_current = sorted(
            name for name in tables1
            if name not in tables2 and not is_sentinel(tables1[name]))
        self._only_in_new = sorted(
            name for name in tables2
            if name not in tables1 and not is_sentinel(tables2[name]))
        self._equal = not (self._only_in_current or self._only_in_new)

        self._table_diffs = [ ]
        for name in sorted(set(tables1) & set(tables2)):
            if is_sentinel(tables1[name]) or is_sentinel(tables2[name]):
                continue
            comparison = self._child_comparison(
                TableComparison(tables1[name], tables2[name]))
            if comparison.is_equal():
                continue
            self._equal = False
            self._table_diffs.append(comparison)
        log.debug2("tables comparison: equal=%s", self._equal)

    def missing(self):
        self.compare()
        return self._only_in_current

    def new(self):
        self.compare()
        return self._only_in_new

    def changed(self):
        self.compare()
        return self._table_diffs

    def diff(self):
        if self.is_equal():
            return [ ]
        lines = [ ]
        for name in self.missing():
            lines.append("Missing table: %s" % name)
            lines.extend(self.tables1.tables[name].render(
                self.including_comments))
        for name in self.new():
            lines.append("New table: %s" % name)
            lines.extend(self.tables2.tables[name].render(
                self.including_comments))
        for comparison in self.changed():
            lines.extend(comparison.diff())
        return lines


class TableComparison(_Comparison):
    def __init__(self, table1, table2):
        super(TableComparison, self).__init__()
        if not isinstance(table1, Table) or not isinstance(table2, Table):
            raise ContractError(errors.TYPE_MISMATCH,
                                "must provide two tables")
        if table1.name != table2.name:
            raise ContractError(errors.NAME_MISMATCH,
                                "table names should match")
        self.table1 = table1
        self.table2 = table2

    def _compare(self):
        chains1 = self.table1.chains
        chains2 = self.table2.chains

        self._only_in_current = sorted(
            name for name in chains1
            if name not in chains2 and not is_sentinel(chains1[name]))
        self._only_in_new = sorted(
            name for name in chains2
            if name not in chains1 and not is_sentinel(chains2[name]))
        self._equal = not (self._only_in_current or self._only_in_new)

        self._chain_diffs = [ ]
        for name in sorted(set(chains1) & set(chains2)):
            if is_sentinel(chains1[name]) or is_sentinel(chains2[name]):
                continue
            comparison = self._child_comparison(
                ChainComparison(chains1[name], chains2[name]))
            if comparison.is_equal():
                continue
            self._equal = False
            self._chain_diffs.append(comparison)
        log.debug2("table comparison %s: equal=%s", self.table1.name,
                   self._equal)

    def missing(self):
        self.compare()
        return self._only_in_current

    def new(self):
        self.compare()
        return self._only_in_new

    def changed(self):
        self.compare()
        return self._chain_diffs

    def diff(self):
        if self.is_equal():
            return [ ]
        lines = [ "Changed table: %s" % self.table1.name ]
        for name in self.missing():
            lines.append("Missing chain:")
            lines.extend(self.table1.chains[name].render_all(
                self.including_comments))
        for name in self.new():
            lines.append("New chain:")
            lines.extend(self.table2.chains[name].render_all(
                self.including_comments))
        for comparison in self.changed():
            lines.extend(comparison.diff())
        return lines


class ChainComparison(_Comparison):
    def __init__(self, chain1, chain2):
        super(ChainComparison, self).__init__()
        if not isinstance(chain1, Chain) or not isinstance(chain2, Chain):
            raise ContractError(errors.TYPE_MISMATCH,
                                "must provide two chains")
        if chain1.name != chain2.name:
            raise ContractError(errors.NAME_MISMATCH,
                                "first and second chain should have same name")
        self.chain1 = chain1
        self.chain2 = chain2

    def _compare(self):
        rules1 = self.chain1.render(self.including_comments)
        rules2 = self.chain2.render(self.including_comments)

        # removed lines are addressed in rules1, added lines in rules2
        (self._missing_rules, self._new_rules) = lcs_patch(rules1, rules2)

        self._new_policy = self.chain1.policy != self.chain2.policy
        self._equal = not (self._missing_rules or self._new_rules or
                           self._new_policy)
        log.debug2("chain comparison %s: equal=%s", self.chain1.path(),
                   self._equal)

    def missing(self):
        self.compare()
        return self._missing_rules

    def new(self):
        self.compare()
        return self._new_rules

    def new_policy(self):
        self.compare()
        return self._new_policy

    def diff(self):
        if self.is_equal():
            return [ ]
        lines = [ "Changed chain: %s" % self.chain1.name ]
        if self.new_policy():
            lines.append("New policy: %s" % self.chain2.output_policy())
        for position in sorted(self.missing()):
            lines.append("-%d: %s" % (position, self.missing()[position]))
        for position in sorted(self.new()):
            lines.append("+%d: %s" % (position, self.new()[position]))
        return lines
