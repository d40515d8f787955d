from __future__ import annotations

import logging
import shlex
import subprocess
from shutil import which

logger = logging.getLogger("wikidata_search.open_action")


def build_url(protocol: str, locator: str) -> str:
    """``https`` + ``//www.wikidata.org/wiki/Q42`` -> ``https://www.wikidata.org/wiki/Q42``"""
    return f"{protocol}:{locator}"


class UrlLauncher:
    """Opens a url with an external command, detached, fire-and-forget."""

    def __init__(self, opener: str = "xdg-open") -> None:
        self.command = shlex.split(opener)

    def _resolve(self) -> list[str] | None:
        if not self.command:
            return None
        found = which(self.command[0])
        if not found:
            logger.warning("opener %r not found on PATH", self.command[0])
            return None
        return [found, *self.command[1:]]

    def open(self, url: str) -> bool:
        cmd = self._resolve()
        if cmd is None:
            return False
        try:
            subprocess.Popen(
                [*cmd, url],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("failed to spawn %s for %s: %s", cmd, url, e)
            return False
        logger.debug("spawned %s %s", cmd, url)
        return True
