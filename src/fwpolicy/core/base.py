# SPDX-License-Identifier: GPL-2.0-or-later

"""Base definitions shared by the table, chain and rule model."""

__all__ = [ "DEFERRED", "DELETED", "is_sentinel", "sentinel_from_info",
            "RULE_TYPES", "CUSTOM_SERVICE_KEYS", "REQUIRES_PRIMITIVE" ]


class _Sentinel(object):
    """ Marker for a table or chain entry that carries no tree. """
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return self.name

    def __bool__(self):
        return False


# no opinion, inherit what the other side of a merge or comparison has
DEFERRED = _Sentinel("DEFERRED")
# remove the entry from the other side during merge
DELETED = _Sentinel("DELETED")


def is_sentinel(value):
    return value is DEFERRED or value is DELETED


def sentinel_from_info(info):
    """ Map declarative input to a sentinel: None defers, False deletes.
    Returns None for anything else. """
    if info is None or info is DEFERRED:
        return DEFERRED
    if info is False or info is DELETED:
        return DELETED
    return None


RULE_TYPES = [
    "comment",
    "custom_service",
    "empty",
    "interpolated",
    "macro",
    "node_addition_points",
    "raw",
    "service",
    "service_tcp",
    "service_udp",
    "ulog",
]

# keys a custom service may carry
CUSTOM_SERVICE_KEYS = [ "service_name", "service_tcp", "service_udp" ]

REQUIRES_PRIMITIVE = "requires_primitive"
