import errno
import logging
import os
import sys

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_CACHE_PATH = os.path.join(os.path.expanduser("~"), ".cache/gseabench")


def unique(seq):
    """Remove duplicates from a list in Python while preserving order.

    :param seq: a python list object.
    :return: a list without duplicates while preserving order.

    """

    seen = set()
    seen_add = seen.add
    # bind seen.add locally, it is resolved once instead of on every item
    return [x for x in seq if x not in seen and not seen_add(x)]


def mkdirs(outdir):
    """create new directory"""
    try:
        os.makedirs(outdir)
    except OSError as exc:
        if exc.errno != errno.EEXIST:
            raise exc
        pass


def log_init(name, log_level=logging.INFO, filename=None):
    """logging

    :param name: logger name
    :log_level: refer to logging module
    :filename: if given a filename, write log to a file (only works in commandline)

    """
    # inside python console enviroment. only need one root logger
    if hasattr(sys, "ps1"):
        name = "gseabench"
    logger = logging.getLogger(name)
    # clear old handlers
    if logger.hasHandlers():
        log_close(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False  # don't find root logger
    # define a Handler which writes INFO messages or higher to the sys.stderr
    console = logging.StreamHandler()
    console.setLevel(log_level)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    console.setFormatter(formatter)
    logger.addHandler(console)
    # only write log file when in command line
    if (not hasattr(sys, "ps1")) and filename:
        fhandler = logging.FileHandler(filename=filename, mode="w")
        fhandler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            "%(asctime)s %(name)s::[%(levelname)-8s] %(message)s"
        )
        fhandler.setFormatter(formatter)
        logger.addHandler(fhandler)
    return logger


def log_close(logger):
    handlers = logger.handlers[:]
    for handler in handlers:
        logger.removeHandler(handler)
        handler.close()


def retry(num=5):
    """retry connection.

    define max tries num
    if the backoff_factor is 0.1, then sleep() will sleep for
    [0.1s, 0.2s, 0.4s, ...] between retries.
    It will also force a retry if the status code returned is 500, 502, 503 or 504.

    """
    s = requests.Session()
    retries = Retry(total=num, backoff_factor=1, status_forcelist=[500, 502, 503, 504])
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))

    return s


def set_cores(threads):
    """clamp the requested number of workers to [1, cpu_count - 1]"""
    cpu_num = max((os.cpu_count() or 2) - 1, 1)
    if threads > cpu_num:
        cores = cpu_num
    elif threads < 1:
        cores = 1
    else:
        cores = threads
    # have to be int if user input is float
    return int(cores)


# CONSTANT
PADJ_METHODS = {
    "BH": "benjamini-hochberg",
    "fdr": "benjamini-hochberg",
    "benjamini-hochberg": "benjamini-hochberg",
    "bonferroni": "bonferroni",
    "none": None,
}
