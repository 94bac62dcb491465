import logging
import sys

LOG = logging.getLogger("ascii_art")


def setup_logging(debug=False, log_path=None):
    """Send the package's log records to stderr, and to `log_path` if given."""
    level = logging.DEBUG if debug else logging.WARNING
    LOG.setLevel(logging.DEBUG)
    for h in list(LOG.handlers):
        LOG.removeHandler(h)
        h.close()

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    LOG.addHandler(sh)

    if log_path:
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        LOG.addHandler(fh)

    LOG.propagate = False  # no double logging via the root logger
    return LOG
