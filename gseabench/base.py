#! python
# -*- coding: utf-8 -*-

import logging
import os
from typing import Optional

import pandas as pd

from gseabench.utils import log_init, mkdirs, set_cores


class BenchmarkBase(object):
    """base class of benchmark runs."""

    def __init__(
        self,
        outdir: Optional[str] = None,
        module: str = "base",
        threads: int = 1,
        verbose: bool = False,
    ):
        self.outdir = outdir
        self.module = module
        self.verbose = verbose
        self._threads = threads

        self._set_cores()
        # init logger
        self.prepare_outdir()

    def __del__(self):
        if hasattr(self, "_logger"):
            handlers = self._logger.handlers[:]
            for handler in handlers:
                handler.close()  # close file
                self._logger.removeHandler(handler)

    def prepare_outdir(self):
        """create output directory and logger."""
        logfile = None
        if isinstance(self.outdir, str):
            mkdirs(self.outdir)
            logfile = os.path.join(
                self.outdir, "gseabench.%s.%s.log" % (self.module, id(self))
            )
        self._logfile = logfile
        self._logger = log_init(
            name=str(self.module) + str(id(self)),
            log_level=logging.INFO if self.verbose else logging.WARNING,
            filename=logfile,
        )

    def _set_cores(self):
        """set cpu numbers to be used"""
        self._threads = set_cores(self._threads)

    def _write_table(self, df: pd.DataFrame, name: str, index: bool = True):
        """write a tab separated table to outdir, if outdir is set"""
        if self.outdir is None:
            return None
        path = os.path.join(self.outdir, "%s.%s.txt" % (self.module, name))
        df.to_csv(path, sep="\t", index=index, float_format="%.6g")
        self._logger.info("Saved %s to %s" % (name, path))
        return path
