# SPDX-License-Identifier: GPL-2.0-or-later

"""Model, render, merge and compare iptables-save style rule sets."""

from fwpolicy.config import VERSION as __version__
from fwpolicy.core.base import DEFERRED, DELETED
from fwpolicy.core.chain import Chain
from fwpolicy.core.comparison import TablesComparison, TableComparison, \
    ChainComparison
from fwpolicy.core.registry import Configuration, Template
from fwpolicy.core.rule import Rule
from fwpolicy.core.table import Table
from fwpolicy.core.tables import Tables
from fwpolicy.errors import PolicyError, ParseError, ModelError, \
    ContractError

__all__ = [ "DEFERRED", "DELETED", "Chain", "ChainComparison",
            "Configuration", "ContractError", "ModelError", "ParseError",
            "PolicyError", "Rule", "Table", "TableComparison", "Tables",
            "TablesComparison", "Template" ]
