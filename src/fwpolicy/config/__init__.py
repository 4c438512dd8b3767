# SPDX-License-Identifier: GPL-2.0-or-later

"""Package wide constants for fwpolicy."""

VERSION = "0.1.0"

# chains rendered first, in this order, when a table has them
PRIORITY_CHAINS = [ "INPUT", "FORWARD", "OUTPUT" ]

# policy column of a chain without a policy
NO_POLICY = "-"

# comments are part of rendered output and comparisons unless disabled
DEFAULT_INCLUDE_COMMENTS = True

# service_tcp / service_udp templates
EPHEMERAL_PORTS = "1024:65535"
SERVICE_STATES = "NEW,ESTABLISHED"
SERVICE_TARGET = "ACCEPT"

# ulog template
ULOG_LIMIT = "1/sec"
ULOG_LIMIT_BURST = 2
ULOG_TCP_RESTRICTION = "-p tcp"
