# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [ "LogTarget", "FileLog", "Logger", "log" ]

import sys
import time
import inspect
import os

# abstract class for logging targets
class LogTarget(object):
    """ Abstract class for logging targets. """
    def __init__(self):
        self.fd = None

    def write(self, data, level, logger, is_debug=0):
        raise NotImplementedError("LogTarget.write is an abstract method")

    def flush(self):
        raise NotImplementedError("LogTarget.flush is an abstract method")

    def close(self):
        raise NotImplementedError("LogTarget.close is an abstract method")

# private class for stdout
class _StdoutLog(LogTarget):
    def __init__(self):
        LogTarget.__init__(self)

    # resolved on every write so that replaced streams (pytest capture) work
    def _stream(self):
        return sys.stdout

    def write(self, data, level, logger, is_debug=0):
        # ignore level
        self._stream().write(data)
        self.flush()

    def close(self):
        self.flush()

    def flush(self):
        self._stream().flush()

# private class for stderr
class _StderrLog(_StdoutLog):
    def _stream(self):
        return sys.stderr

class FileLog(LogTarget):
    """ FileLog class.
    File will be opened on the first write. """
    def __init__(self, filename, mode="w"):
        LogTarget.__init__(self)
        self.filename = filename
        self.mode = mode

    def open(self):
        if self.fd:
            return
        flags = os.O_CREAT | os.O_WRONLY
        if self.mode.startswith('a'):
            flags |= os.O_APPEND
        fd = os.open(self.filename, flags, 0o640)
        self.fd = os.fdopen(fd, self.mode)

    def write(self, data, level, logger, is_debug=0):
        if not self.fd:
            self.open()
        self.fd.write(data)
        self.fd.flush()

    def close(self):
        if not self.fd:
            return
        self.fd.close()
        self.fd = None

    def flush(self):
        if not self.fd:
            return
        self.fd.flush()

class Logger(object):
    """
    Format string keys: date, file, function, label, level, line, module
    and message.

    Levels: WARNING, INFOx with x in [1..info_max] and DEBUGy with y in
    [1..debug_max]. NO_INFO and NO_DEBUG switch the output off.

    Example:

    from fwpolicy.core.logger import log, FileLog
    log.setDebugLogLevel(log.DEBUG2)
    log.setDebugLogging(FileLog("/tmp/fwpolicy.log", "a"))
    log.setFormat("%(date)s %(module)s:%(line)d %(label)s%(message)s")
    """

    ALL       = -2
    NOTHING   = -1
    WARNING   =  0

    stdout = _StdoutLog()
    stderr = _StderrLog()

    def __init__(self, info_max=5, debug_max=10):
        self._label = { self.WARNING: "WARNING: " }
        self._debug_label = { }
        self._logging = { }
        self._debug_logging = { }

        self.NO_INFO   = self.WARNING # = 0
        self.INFO_MAX  = info_max
        self.NO_DEBUG  = 0
        self.DEBUG_MAX = debug_max

        # generate info levels and infox functions
        for _level in range(1, self.INFO_MAX+1):
            setattr(self, "INFO%d" % _level, _level)
            self._label[_level] = ""
            setattr(self, "info%d" % (_level),
                    (lambda self, x:
                     lambda message, *args:
                     self.info(x, message, *args))(self, _level))

        # generate debug levels and debugx functions
        for _level in range(1, self.DEBUG_MAX+1):
            setattr(self, "DEBUG%d" % _level, _level)
            self._debug_label[_level] = "DEBUG%d: " % _level
            setattr(self, "debug%d" % (_level),
                    (lambda self, x:
                     lambda message, *args:
                     self.debug(x, message, *args))(self, _level))

        # set initial log levels, formats and targets
        self.setInfoLogLevel(self.INFO1)
        self.setDebugLogLevel(self.NO_DEBUG)
        self.setFormat("%(label)s%(message)s")
        self.setDateFormat("%d %b %Y %H:%M:%S")
        self.setInfoLogging(self.stderr, self.WARNING)
        self.setInfoLogging(self.stdout,
                            [ i for i in range(self.INFO1, self.INFO_MAX+1) ])
        self.setDebugLogging(self.stdout)

    def close(self):
        """ Close all logging targets """
        for _logging in (self._logging, self._debug_logging):
            for targets in _logging.values():
                for target in targets:
                    target.close()

    def getInfoLogLevel(self):
        return self._level

    def setInfoLogLevel(self, level):
        """ Set log level [NOTHING .. INFO_MAX] """
        self._level = min(max(level, self.NOTHING), self.INFO_MAX)

    def getDebugLogLevel(self):
        return self._debug_level

    def setDebugLogLevel(self, level):
        """ Set debug log level [NO_DEBUG .. DEBUG_MAX] """
        self._debug_level = min(max(level, self.NO_DEBUG), self.DEBUG_MAX)

    def setFormat(self, _format):
        self._format = _format

    def setDateFormat(self, _format):
        self._date_format = _format

    def setInfoLogging(self, target, level=ALL):
        """ Set info log target for level, replacing all targets of the
        level. """
        for _level in self._getLevels(level, is_debug=0):
            self._logging[_level] = self._getTargets(target)

    def setDebugLogging(self, target, level=ALL):
        """ Set debug log target for level, replacing all targets of the
        level. """
        for _level in self._getLevels(level, is_debug=1):
            self._debug_logging[_level] = self._getTargets(target)

    def addInfoLogging(self, target, level=ALL):
        self._addLogging(self._logging, target, level, is_debug=0)

    def addDebugLogging(self, target, level=ALL):
        self._addLogging(self._debug_logging, target, level, is_debug=1)

    def delInfoLogging(self, target, level=ALL):
        self._delLogging(self._logging, target, level, is_debug=0)

    def delDebugLogging(self, target, level=ALL):
        self._delLogging(self._debug_logging, target, level, is_debug=1)

    ### log functions

    def warning(self, _format, *args):
        self._log(self.WARNING, _format, args, is_debug=0)

    def info(self, level, _format, *args):
        """ Information log using info level [1..info_max]. """
        self._checkLogLevel(level, min_level=1, max_level=self.INFO_MAX)
        self._log(level+self.NO_INFO, _format, args, is_debug=0)

    def debug(self, level, _format, *args):
        """ Debug log using debug level [1..debug_max]. """
        self._checkLogLevel(level, min_level=1, max_level=self.DEBUG_MAX)
        self._log(level, _format, args, is_debug=1)

    ### internal functions

    def _checkLogLevel(self, level, min_level, max_level):
        if level < min_level or level > max_level:
            raise ValueError("Level %d out of range, should be [%d..%d]." % \
                             (level, min_level, max_level))

    def _getLevels(self, level, is_debug):
        """ Generate log level array. """
        if is_debug:
            (min_level, max_level) = (1, self.DEBUG_MAX)
        else:
            (min_level, max_level) = (self.WARNING, self.INFO_MAX)
        if level == self.ALL:
            return [ i for i in range(min_level, max_level+1) ]
        if isinstance(level, (list, tuple)):
            levels = level
        else:
            levels = [ level ]
        for _level in levels:
            self._checkLogLevel(_level, min_level, max_level)
        return levels

    def _getTargets(self, target):
        """ Generate target array. """
        if isinstance(target, (list, tuple)):
            targets = list(target)
        else:
            targets = [ target ]
        for _target in targets:
            if not isinstance(_target, LogTarget):
                raise ValueError("'%s' is no valid logging target." % \
                      _target.__class__.__name__)
        return targets

    def _addLogging(self, _logging, target, level, is_debug):
        targets = self._getTargets(target)
        for _level in self._getLevels(level, is_debug):
            _logging.setdefault(_level, [ ]).extend(targets)

    def _delLogging(self, _logging, target, level, is_debug):
        targets = self._getTargets(target)
        for _level in self._getLevels(level, is_debug):
            for target in targets:
                if target in _logging.get(_level, [ ]):
                    _logging[_level].remove(target)
                    if not _logging[_level]:
                        del _logging[_level]
                elif level != self.ALL:
                    raise ValueError("No matching logging for level %d and "
                                     "target %s." % \
                                     (_level, target.__class__.__name__))

    def _isEnabled(self, level, is_debug):
        if is_debug:
            return level <= self._debug_level and level in self._debug_logging
        return level <= self._level and level in self._logging

    # internal log class
    def _log(self, level, _format, args, is_debug):
        if not self._isEnabled(level, is_debug):
            return

        _dict = self._genDict(level, is_debug)
        # a single tuple or dict argument is formatted as one value
        if args:
            _dict['message'] = _format % args
        else:
            _dict['message'] = _format

        _logging = self._debug_logging if is_debug else self._logging

        used_targets = [ ]
        # log to target(s)
        for target in _logging[level]:
            if target in used_targets:
                continue
            target.write(self._format % _dict, level, self, is_debug)
            target.write("\n", level, self, is_debug)
            used_targets.append(target)

    # internal function to generate the dict, needed for logging
    def _genDict(self, level, is_debug):
        f = inspect.currentframe()

        # go outside of logger module as long as there is a lower frame
        while f and f.f_back and f.f_globals["__name__"] == self.__module__:
            f = f.f_back

        if not f:
            raise ValueError("Frame information not available.")

        co = f.f_code
        if is_debug:
            label = self._debug_label[level]
        else:
            label = self._label[level]

        return {
            "date": time.strftime(self._date_format, time.localtime()),
            "file": os.path.basename(co.co_filename),
            "function": co.co_name,
            "label": label,
            "level": level,
            "line": f.f_lineno,
            "module": f.f_globals["__name__"],
        }

log = Logger()

# vim:ts=4:sw=4:showmatch:expandtab
