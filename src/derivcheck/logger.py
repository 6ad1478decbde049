"""Contains the name for the logger of DerivCheck modules.

``derivcheck`` uses a simple logging system based on the
`Logging <https://docs.python.org/3/library/logging.html>`__ standard library.
Logging messages are grouped in different levels:

* ``DEBUG``: Per-probe summaries (worst error, number of blocks checked).
* ``WARNING``: A probe failed, either because the evaluator reported a
    failure or because analytic and numeric Jacobians disagree.

By default, only messages of level ``WARNING`` are displayed.

Calling applications can configure the format and log level of the displayed messages
by `Configuring Logging <https://docs.python.org/3/howto/logging.html#configuring-logging>`__
for ``derivcheck.logger.derivcheck_logger``, e.g.::

    >>> import logging
    >>> logging.basicConfig(
    ...     level=logging.DEBUG,
    ...     format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    ... )
"""
import logging

logger_name = "derivcheck"
derivcheck_logger = logging.getLogger(logger_name)
