# SPDX-License-Identifier: GPL-2.0-or-later

"""In-memory configuration consumed by rule expansion.

Rule expansion only calls has_primitive(), get_macro(), get_service() and
interpolation_children(), so any object offering these can stand in for
Configuration.
"""

__all__ = [ "Template", "Configuration" ]

import itertools
import re

from fwpolicy.core.logger import log
from fwpolicy import errors
from fwpolicy.errors import ModelError

# Example: -s <% networks.office %> -j ACCEPT
INTERPOLATION_REGEX = re.compile(r"<%\s*(\S+?)\s*%>")


class Template(object):
    """ Named, ordered list of rule descriptions (macro or service). """
    def __init__(self, name, children=None):
        self.name = name
        self.children = list(children or [])

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.name,
                               self.children)


class Configuration(object):
    def __init__(self, primitives=None, macros=None, services=None):
        self.primitives = primitives if primitives is not None else { }
        self._macros = { }
        self._services = { }
        for (name, children) in (macros or { }).items():
            self.add_macro(Template(name, children))
        for (name, children) in (services or { }).items():
            self.add_service(Template(name, children))

    @classmethod
    def from_dict(cls, settings):
        return cls(primitives=settings.get("primitives"),
                   macros=settings.get("macros"),
                   services=settings.get("services"))

    # primitives

    def _lookup_primitive(self, name):
        value = self.primitives
        for part in name.split("."):
            if not isinstance(value, dict) or part not in value:
                raise KeyError(name)
            value = value[part]
        return value

    def has_primitive(self, name):
        try:
            self._lookup_primitive(name)
        except KeyError:
            return False
        return True

    def get_primitive(self, name):
        try:
            return self._lookup_primitive(name)
        except KeyError:
            raise ModelError(errors.MISSING_PRIMITIVE, name)

    # macros

    def get_macros(self):
        return sorted(self._macros.keys())

    def add_macro(self, obj):
        self._macros[obj.name] = obj

    def get_macro(self, name):
        v = self._macros.get(name)
        if v is None:
            raise ModelError(errors.INVALID_MACRO, name)
        return v

    # services

    def get_services(self):
        return sorted(self._services.keys())

    def add_service(self, obj):
        self._services[obj.name] = obj

    def get_service(self, name):
        v = self._services.get(name)
        if v is None:
            raise ModelError(errors.INVALID_SERVICE, name)
        return v

    # interpolations

    def interpolation_children(self, arg):
        """ Expand every <% path %> token of arg with the primitive at path.
        A list valued primitive yields one raw rule per value; several list
        tokens yield the cartesian product in token order. """
        names = INTERPOLATION_REGEX.findall(arg)
        values = [ ]
        for name in names:
            value = self.get_primitive(name)
            if isinstance(value, (list, tuple)):
                values.append([ str(x) for x in value ])
            else:
                values.append([ str(value) ])

        children = [ ]
        for combination in itertools.product(*values):
            replacements = iter(combination)
            children.append({ "raw": INTERPOLATION_REGEX.sub(
                lambda match: next(replacements), arg) })
        log.debug3("interpolated '%s' into %d rules", arg, len(children))
        return children
