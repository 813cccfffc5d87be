import asyncio
import logging
from typing import Optional, Sequence

from audio_audit.storage import BaseStorage
from .models import CheckResult, Record
from .paths import DEFAULT_AUDIO_PREFIXES, build_candidate_paths

logger = logging.getLogger("audit.checker")


class ExistenceChecker:
    """
    Probe storage for the audio file of a record.

    Candidate paths are probed in order and the first hit wins. A probe that
    raises makes the whole result inconclusive: it is logged and never counted
    as missing, and it is not retried.

    Args:
        storage: Backend answering existence probes
        prefixes: Directory prefixes in probe order (current layout first)
        timeout: Per-probe timeout in seconds, None for no timeout
    """

    def __init__(
        self,
        storage: BaseStorage,
        prefixes: Sequence[str] = DEFAULT_AUDIO_PREFIXES,
        timeout: Optional[float] = None,
    ):
        self.storage = storage
        self.prefixes = tuple(prefixes)
        self.timeout = timeout

    def candidate_paths(self, record: Record) -> list[str]:
        return build_candidate_paths(record.identifier, self.prefixes)

    async def _probe(self, path: str) -> bool:
        if self.timeout is None:
            return await self.storage.exists(path)
        return await asyncio.wait_for(self.storage.exists(path), timeout=self.timeout)

    async def check(self, record: Record) -> CheckResult:
        probed = []
        for path in self.candidate_paths(record):
            probed.append(path)
            try:
                exists = await self._probe(path)
            except asyncio.TimeoutError:
                error = f"timed out after {self.timeout}s probing {path}"
                logger.warning(f"Could not check '{record.identifier}': {error}")
                return CheckResult(record, error=error, checked_paths=tuple(probed))
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
                logger.warning(f"Could not check '{record.identifier}': {error}")
                return CheckResult(record, error=error, checked_paths=tuple(probed))

            if exists:
                logger.debug(f"Found '{record.identifier}' at {path}")
                return CheckResult(record, found=True, checked_paths=tuple(probed))

        logger.debug(f"'{record.identifier}' not found in {len(probed)} location(s)")
        return CheckResult(record, found=False, checked_paths=tuple(probed))
