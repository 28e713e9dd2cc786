# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""Module that handles output (status, warning and error messages and progress bars)."""
from time import time
from progress.bar import Bar
from multiprocessing import Queue, Process
import os
from pathlib import Path


_log_enabled = False
_log_file = False
_progress_enabled = False
_start_time = time()
# queue used to forward log entries to the file-writer
_log_queue = None
# the process that is doing the writing
_log_file_process = None

WARNING_PREFIX = "Warning: "
ERROR_PREFIX = "Error: "


def _log_queue_writer(file, queue):
    """Receive messages from the queue and append them to file until a False arrives."""
    parent_folder = os.path.dirname(file)
    if parent_folder:
        Path(parent_folder).mkdir(parents=True, exist_ok=True)
    with open(file, "a") as log_out:
        while True:
            s = queue.get()
            if not s:
                break
            log_out.write(s)
            log_out.write("\n")
            log_out.flush()


def log_timestamp_reset():
    """Reset the log time to the current time."""
    global _start_time
    _start_time = time()


def log_enable(setting):
    """Enable or disable printing of log messages."""
    global _log_enabled
    _log_enabled = bool(setting)


def log_file(file):
    """
    Define that the log should be writen out to a file.

    :param file: (str, False) if a string then it defines the output path; if False disables
        writing
    """
    global _log_file
    global _log_queue
    global _log_file_process

    if isinstance(file, str):
        _log_file = True
        if _log_queue is not None:
            # close down the old writer
            _log_queue.put(False)
        _log_queue = Queue()
        _log_file_process = Process(target=_log_queue_writer, args=(file, _log_queue),
                                    daemon=True)
        _log_file_process.start()
    elif isinstance(file, bool) and not file:
        _log_file = False
        if _log_queue is not None:
            _log_queue.put(False)
            if _log_file_process is not None:
                _log_file_process.join()
                _log_file_process = None
        _log_queue = None
    else:
        raise ValueError("log_file only accepts a file path or False as parameter")


def progress_enable(setting):
    """Enable or disable displaying progress bars."""
    global _progress_enabled
    _progress_enabled = bool(setting)


def log(message):
    """Log a status message."""
    if _log_enabled or _log_file:
        timestamp = time() - _start_time
        timedmessage = "%.3f: %s" % (timestamp, message)
        if _log_enabled:
            if message:
                print(timedmessage)
            else:
                print(flush=True)
        if _log_file:
            if message:
                _log_queue.put(timedmessage)
            else:
                log_file(False)


def log_warning(message):
    """Log a warning."""
    log(WARNING_PREFIX + message)


def log_error(message, ex=None):
    """
    Log an error.

    :param message: (str) the error message
    :param ex: (Exception) optional exception whose text is appended if not already part of
        the message
    """
    if ex is not None and str(ex) not in message:
        message = "%s: %s" % (message, ex)
    log(ERROR_PREFIX + message)
    return message


def should_show_periodic_warning(warning_count, threshold_count_always_show=10):
    """
    Decide whether the n-th occurrence of a repeated warning should be shown.

    All warnings up to threshold_count_always_show are shown. After that every 100th below
    1000, every 1000th below 10000 and so on up to one million.
    """
    if warning_count <= threshold_count_always_show:
        return True
    step = 100
    while step <= 100000:
        if warning_count < step * 10 and warning_count % step == 0:
            return True
        step *= 10
    return False


def show_periodic_warning(warning_count, threshold_count_always_show, message):
    """Log a repeated warning, thinning it out once it occurred often."""
    if should_show_periodic_warning(warning_count, threshold_count_always_show):
        log_warning(message)
        return True
    return False


class ProgressBar(object):
    """Bar to visualize the progression of a process."""
    class NiceEtaBar(Bar):
        len_last_eta = 0

        @property
        def nice_eta(self):
            """Transform the eta into a human readable text."""
            if self.index == self.max:
                ret = str(self.elapsed_td) + " total"
            else:
                ret = str(int(self.percent*10)/10) + "% ~"
                eta = self.eta
                counts = " remaining (%d/%d)" % (self.index, self.max)
                if eta > 172800:
                    ret += str(eta // 86400) + "days " + counts
                elif eta > 7200:
                    ret += str(eta // 3600) + "h " + counts
                elif eta > 120:
                    ret += str(eta // 60) + "m " + counts
                else:
                    ret += str(eta) + "s " + counts

            # clean up left over from last print out
            new_len = len(ret)
            if new_len < self.len_last_eta:
                ret += " " * (self.len_last_eta - new_len)

            self.len_last_eta = new_len
            return ret

    def __init__(self, message, total):
        """Initialise the ProgressBar with a message and a total number of steps."""
        self.message = message
        self.total = total
        self.count = 0
        self.percent = 0
        if _progress_enabled:
            self.timestamp = time() - _start_time
            self.logtimestamp = self.timestamp
            if total > 1:
                self.bar = self.NiceEtaBar("%.3f: %s" % (self.timestamp, message), max=total,
                                           suffix='%(nice_eta)s')
            if _log_file:
                _log_queue.put("%.3f: %s" % (self.timestamp, message))
        else:
            log(message)

    def next(self, add_to_count=1):
        """Progress the bar."""
        self.count += add_to_count
        if _progress_enabled and self.total > 1:
            timestamp = time() - _start_time
            percent = int(self.count / self.total * 100)
            # redraw when a new percent was reached (at most once a second)
            # or at least once a minute
            if ((percent > self.percent) and (timestamp - self.timestamp > 1)) \
                    or (timestamp - self.timestamp > 60):
                self.timestamp = timestamp
                self.bar.goto(min(self.count, self.total))
                if _log_file:
                    if (timestamp - self.logtimestamp > 10) and (percent > self.percent):
                        self.logtimestamp = timestamp
                        _log_queue.put("%.3f: %s %i%%" % (self.timestamp, self.message, percent))
                self.percent = percent

    def finish(self):
        """Finish the ProgressBar."""
        if _progress_enabled and self.total > 1:
            self.bar.goto(self.total)
            self.bar.finish()
        if _log_file:
            timestamp = time() - _start_time
            _log_queue.put("%.3f: %s finished" % (timestamp, self.message))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.finish()
        return False
