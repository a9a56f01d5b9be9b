# ============================================================================
# SOURCEFILE: extractor.py
# RELPATH: datachunk/src/datachunk/extractor.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Decodes every chunk of a document and writes output.file chunks
# ============================================================================

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from datachunk.exceptions import (
    DataChunkError,
    DocumentWriteError,
    InvalidArgumentsError,
    OverwriteError,
)
from datachunk.logging import StructuredLogger
from datachunk.models import ChunkResult
from datachunk.scanner import DEFAULT_ENGINE, decode_chunk, scan

logger = logging.getLogger(__name__)


class OverwritePolicy(Enum):
    PROMPT = "prompt"
    SKIP = "skip"
    OVERWRITE = "overwrite"
    RENAME = "rename"


class ChunkExtractor:
    """
    Host-engine side of a data chunk: decode, verify, then hand over bytes.

    Each chunk is processed on its own; a chunk that fails to decode or
    verify is reported in its ChunkResult and the rest of the document is
    still processed.
    """

    def __init__(self,
                 base_path: Optional[Path] = None,
                 overwrite_policy: Union[str, OverwritePolicy] = OverwritePolicy.PROMPT,
                 dry_run: bool = False,
                 verify: bool = True,
                 engine: str = DEFAULT_ENGINE,
                 structured_logger: Optional[StructuredLogger] = None):
        """
        Initialize ChunkExtractor.

        Args:
            base_path: Directory output.file paths are resolved against (defaults to cwd)
            overwrite_policy: prompt, skip, overwrite or rename
            dry_run: If True, decode and report without touching the filesystem
            verify: Check md5sum options; False skips the check
            engine: Engine name of the chunks to process
            structured_logger: Optional JSON audit log
        """
        self.base_path = Path(base_path).resolve() if base_path else Path.cwd().resolve()

        if isinstance(overwrite_policy, OverwritePolicy):
            policy = overwrite_policy.value
        else:
            policy = str(overwrite_policy).lower()
        valid_policies = [p.value for p in OverwritePolicy]
        if policy not in valid_policies:
            raise InvalidArgumentsError(
                f"overwrite policy must be one of {', '.join(valid_policies)}, got '{policy}'"
            )

        self.overwrite_policy = policy
        self.dry_run = dry_run
        self.verify = verify
        self.engine = engine
        self.structured_logger = structured_logger

        self.files_written: List[Path] = []
        self.files_skipped: List[Path] = []
        self.files_renamed: Dict[Path, Path] = {}
        self.pending_writes: Set[Path] = set()

    def process_document(self, document_lines: Sequence[str]) -> List[ChunkResult]:
        """
        Decode and verify every chunk of a document.

        Returns:
            One ChunkResult per chunk, in document order

        Raises:
            MalformedHeaderError, UnterminatedChunkError: The document itself
                cannot be scanned
        """
        results: List[ChunkResult] = []
        for chunk in scan(document_lines, self.engine):
            result = ChunkResult(chunk=chunk)
            try:
                result.data = decode_chunk(chunk, verify=self.verify)
                result.verified = self.verify and bool(chunk.options.md5sum)
            except DataChunkError as e:
                logger.warning("Chunk '%s' (line %d) failed: %s", chunk.label, chunk.line_number, e)
                result.error = e
                if self.structured_logger:
                    self.structured_logger.log_error(
                        "extract", str(e), type(e).__name__, chunk.label, chunk.line_number
                    )
            else:
                if self.structured_logger:
                    self.structured_logger.log_chunk_decoded(
                        chunk.label, chunk.options.encoding or "asis",
                        len(result.data), chunk.start, chunk.end
                    )
                    if result.verified:
                        self.structured_logger.log_checksum_verification(chunk.label, True)
            results.append(result)
        return results

    def write_chunk(self, result: ChunkResult) -> Tuple[str, str]:
        """
        Write one decoded chunk to its output.file.

        Returns:
            (status, target_path) where status is 'processed' or 'skipped'

        Raises:
            InvalidArgumentsError: Chunk failed to decode or has no output.file
            OverwriteError: Target exists and policy is prompt
            DocumentWriteError: Path escapes base_path or the write fails
        """
        if not result.ok or result.data is None:
            raise InvalidArgumentsError(f"chunk '{result.chunk.label}' has no decoded data")
        output_file = result.chunk.options.output_file
        if not output_file:
            raise InvalidArgumentsError(f"chunk '{result.chunk.label}' has no output.file")

        target = self._resolve_output_path(output_file)

        if target.exists() or target in self.pending_writes:
            if self.overwrite_policy == OverwritePolicy.PROMPT.value:
                raise OverwriteError(str(target))
            elif self.overwrite_policy == OverwritePolicy.SKIP.value:
                self.files_skipped.append(target)
                if self.structured_logger:
                    self.structured_logger.log_warning(
                        "existing file skipped", {"label": result.chunk.label, "path": str(target)}
                    )
                return ("skipped", str(target))
            elif self.overwrite_policy == OverwritePolicy.RENAME.value:
                original_target = target
                target = self._get_renamed_path(target)
                self.files_renamed[original_target] = target

        if not self.dry_run:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(result.data)
            except OSError as e:
                raise DocumentWriteError(str(target), f"Filesystem write failed: {e}")

        self.files_written.append(target)
        self.pending_writes.add(target)
        return ("processed", str(target))

    def extract_document(self, document_lines: Sequence[str]) -> Dict[str, int]:
        """
        Decode every chunk and write those that name an output.file.

        Returns:
            {"processed": int, "skipped": int, "errors": int}
        """
        self.files_written.clear()
        self.files_skipped.clear()
        self.files_renamed.clear()
        self.pending_writes.clear()

        stats = {"processed": 0, "skipped": 0, "errors": 0}

        for result in self.process_document(document_lines):
            if not result.ok:
                stats["errors"] += 1
                continue
            if not result.chunk.options.output_file:
                stats["skipped"] += 1
                continue
            try:
                status, _ = self.write_chunk(result)
            except OverwriteError:
                stats["errors"] += 1
                raise
            except DocumentWriteError as e:
                logger.warning("Error writing chunk '%s': %s", result.chunk.label, e)
                stats["errors"] += 1
                continue
            stats[status] += 1

        return stats

    def _resolve_output_path(self, output_file: str) -> Path:
        """Resolve output.file under base_path, refusing escapes."""
        relative = PurePosixPath(output_file.replace("\\", "/"))
        target = (self.base_path / relative).resolve()
        try:
            target.relative_to(self.base_path)
        except ValueError:
            raise DocumentWriteError(
                output_file,
                f"Resolved path '{target}' would escape base directory '{self.base_path}'"
            )
        return target

    def _get_renamed_path(self, original: Path) -> Path:
        """file.csv -> file_1.csv -> file_2.csv, skipping pending writes."""
        counter = 1
        while True:
            candidate = original.parent / f"{original.stem}_{counter}{original.suffix}"
            if not candidate.exists() and candidate not in self.pending_writes:
                return candidate
            counter += 1


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: scanner.py, models.py, exceptions.py, logging.py
# TESTS: tests/unit/test_extractor.py
# ============================================================================
