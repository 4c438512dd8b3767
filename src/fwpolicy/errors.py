# SPDX-License-Identifier: GPL-2.0-or-later

UNHANDLED_LINE      =   11
INVALID_CHAIN       =   12
NO_TABLES           =   13
INVALID_INPUT       =   14

INVALID_RULE        =  100
INVALID_TYPE        =  101
INVALID_SERVICE_KEY =  102
INVALID_MACRO       =  103
INVALID_SERVICE     =  104
EMPTY_RULE          =  105

MISSING_NAME        =  200
MISSING_CONFIG      =  201
MISSING_PRIMITIVE   =  202

TYPE_MISMATCH       =  300
NAME_MISMATCH       =  301

UNKNOWN_ERROR       =  254

import sys

class PolicyError(Exception):
    def __init__(self, code, msg=None):
        super(PolicyError, self).__init__(code, msg)
        self.code = code
        self.msg = msg

    def __repr__(self):
        return '%s(%r, %r)' % (self.__class__.__name__, self.code, self.msg)

    def __str__(self):
        if self.msg:
            return "%s: %s" % (self.errors[self.code], self.msg)
        return self.errors[self.code]

    def get_code(msg):
        if ":" in msg:
            idx = msg.index(":")
            ecode = msg[:idx]
        else:
            ecode = msg

        try:
            code = PolicyError.codes[ecode]
        except KeyError:
            code = UNKNOWN_ERROR

        return code

    get_code = staticmethod(get_code)

class ParseError(PolicyError):
    """ Text or declarative input that can not be turned into a tree. """

class ModelError(PolicyError):
    """ Rule descriptions that can not be expanded or rendered. """

class ContractError(PolicyError):
    """ Merge or comparison of objects that do not belong together. """

mod = sys.modules[PolicyError.__module__]
PolicyError.errors = { getattr(mod,varname) : varname
                       for varname in dir(mod)
                       if not varname.startswith("_") and \
                       type(getattr(mod,varname)) == int }
PolicyError.codes =  { PolicyError.errors[code] : code
                       for code in PolicyError.errors }
