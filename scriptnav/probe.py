"""Extension and index-file probing shared by the resolution strategies."""

import os
from collections.abc import Sequence

from scriptnav.fs import FileSystem
from scriptnav.utils.constants import DEFAULT_EXTENSIONS, INDEX_BASENAME
from scriptnav.utils.logging import component_logger

_log = component_logger("probe")


def probe_candidates(base: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> list[str]:
    """Every path ``probe`` tests for ``base``, in order."""
    return (
        [base]
        + [base + ext for ext in extensions]
        + [os.path.join(base, INDEX_BASENAME + ext) for ext in extensions]
    )


def probe(
    base: str,
    fs: FileSystem,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    log=None,
) -> str | None:
    """Return the first existing regular file among ``base``, ``base + ext``
    and ``base/index + ext``, or None.

    An error while checking one candidate only rules out that candidate.
    """
    log = log or _log
    for candidate in probe_candidates(base, extensions):
        try:
            if fs.is_file(candidate):
                return candidate
        except (OSError, ValueError) as e:
            log.debug("Probe failed for {path}: {err}", path=candidate, err=e)
    return None
