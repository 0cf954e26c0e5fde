"""
stackmirror orchestrator: runs the end-to-end sync.

Archive listing -> post fetch -> optional Markdown conversion -> file write,
one post at a time, with a shared throttle between network operations.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from .config import SyncConfig
from .errors import MirrorError
from .logger import ErrorTracker
from .markdown_converter import ContentTransformer
from .models import ArchiveEntry, EntryState
from .substack_client import SubstackClient
from ..utils.file_manager import FileManager
from ..utils.rate_limiter import Throttle


class SyncController:
    def __init__(self,
                 config: SyncConfig,
                 throttle=None,
                 client: Optional[SubstackClient] = None,
                 transformer: Optional[ContentTransformer] = None,
                 files: Optional[FileManager] = None,
                 error_tracker: Optional[ErrorTracker] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        # One throttle for every request the run makes
        self.throttle = throttle if throttle is not None else Throttle(interval=config.request_delay)
        self.client = client or SubstackClient(config, self.throttle)
        self.transformer = transformer or ContentTransformer(config)
        self.files = files or FileManager(config.dest_folder)
        self.errors = error_tracker or ErrorTracker(self.logger)
        self.states: Dict[str, EntryState] = {}

    def run(self, progress: Optional[Callable[[object], None]] = None) -> Dict[str, int]:
        """
        Mirror every post newer than config.since.

        A failure fetching the archive listing propagates and aborts the run.
        A failure on an individual post is logged and that post is skipped.

        Returns:
            Counters: discovered, written, skipped
        """
        stats = {"discovered": 0, "written": 0, "skipped": 0}

        if progress:
            progress("Fetching archive listing...")
        archive = self.client.fetch_archive(self.config.since)
        stats["discovered"] = len(archive)
        self.logger.info(f"fetching {len(archive)} posts")
        if progress:
            progress({"type": "discovery", "total": len(archive)})

        for idx, entry in enumerate(archive, 1):
            try:
                state = self.process_one(idx, entry, progress)
            finally:
                self.throttle.wait_for_slot()
            if state is EntryState.DONE:
                stats["written"] += 1
            else:
                stats["skipped"] += 1

        self.logger.info(f"Sync complete: {stats['written']} written, {stats['skipped']} skipped")
        if progress:
            progress({"type": "counters", "stats": stats})
        return stats

    def process_one(self,
                    idx: int,
                    entry: ArchiveEntry,
                    progress: Optional[Callable[[object], None]] = None) -> EntryState:
        """Fetch, convert and write one archive entry. Returns its final state."""
        slug = entry.slug
        state = EntryState.FETCHING
        try:
            self._report(progress, idx, slug, state)
            post = self.client.fetch_post(slug)

            if self.config.needs_markdown:
                state = EntryState.TRANSFORMING
                self._report(progress, idx, slug, state)
                post = self.transformer.transform(post)

            state = EntryState.WRITING
            self._report(progress, idx, slug, state)
            self.files.save_post(post, self.config.output_format, entry.section_slug)
        except MirrorError as e:
            self.errors.log_error(e, context=state.value, slug=slug)
            self.states[slug] = EntryState.SKIPPED
            if progress:
                progress({"type": "post", "index": idx, "stage": EntryState.SKIPPED.value,
                          "slug": slug, "reason": state.value})
            return EntryState.SKIPPED

        self.states[slug] = EntryState.DONE
        self._report(progress, idx, slug, EntryState.DONE)
        return EntryState.DONE

    def _report(self, progress, idx: int, slug: str, state: EntryState):
        self.states[slug] = state
        if progress:
            progress({"type": "post", "index": idx, "stage": state.value, "slug": slug})

    def close(self):
        self.client.close()
