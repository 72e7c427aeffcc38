# proc_tree/enumerator.py

import logging
from dataclasses import dataclass

import psutil

from .errors import EnumerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessRecord:
    """
    One entry of a flat process listing, as returned by an enumerator.
    """

    pid: int
    ppid: int
    executable: str


def list_processes():
    """
    Scans the operating system process table.
    Processes that exit during the scan are skipped. A name we are not
    allowed to read is reported as "?" and an unreadable ppid as 0.

    Raises EnumerationError if the process table cannot be read at all.
    """
    records = []
    try:
        for proc in psutil.process_iter(attrs=["pid", "ppid", "name"], ad_value=None):
            info = proc.info
            records.append(
                ProcessRecord(
                    pid=info["pid"],
                    ppid=info["ppid"] or 0,
                    executable=info["name"] or "?",
                )
            )
    except (psutil.Error, OSError) as e:
        raise EnumerationError(f"Unable to list processes: {e}") from e

    logger.debug(f"Scanned {len(records)} processes")
    return records
