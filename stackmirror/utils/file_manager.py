"""
File Management Utilities

This module renders each post into its final HTML or Markdown artifact and
writes it to the destination folder as {slug}.{ext}.
"""

import os
from pathlib import Path
from typing import Dict, Any
import logging

from ..core.errors import WriteError
from ..core.models import OutputArtifact, PostDocument


MARKDOWN_TEMPLATE = """---
title: "{front_title}"
date: {date}
alias: []
tags: [{tag}]
---

# {title}

{subtitle}

---

{body}"""


class FileManager:
    """
    Manages rendering and writing of mirrored posts.

    Writing always overwrites, so re-running a sync against unchanged data
    leaves byte-identical files behind.
    """

    EXTENSIONS = ('html', 'md')

    def __init__(self, dest_folder: str = "."):
        """
        Initialize the file manager.

        Args:
            dest_folder: Directory that receives one file per post
        """
        self.dest_folder = Path(dest_folder)
        self.logger = logging.getLogger(__name__)

    def _create_directories(self):
        """Create the destination directory if needed."""
        try:
            self.dest_folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Cannot create destination folder {self.dest_folder}: {e}",
                             path=str(self.dest_folder)) from e

    def get_file_path(self, slug: str, output_format: str) -> Path:
        """Return {dest}/{slug}.{output_format}."""
        return self.dest_folder / f"{slug}.{output_format}"

    def render(self, post: PostDocument, output_format: str, tag: str) -> OutputArtifact:
        """
        Render a post into its output artifact.

        Args:
            post: The post, already transformed for the target format
            output_format: 'html' or 'md'
            tag: Tag for the Markdown front matter (the post's section slug)

        Returns:
            OutputArtifact with the destination path and file content
        """
        if output_format == 'md':
            content = MARKDOWN_TEMPLATE.format(
                front_title=self._escape_front_matter(post.title),
                date=post.publish_date.strftime('%Y-%m-%d'),
                tag=tag,
                title=post.title,
                subtitle=post.subtitle,
                body=post.body_html,
            )
        elif output_format == 'html':
            content = (f"<h1>{self._escape_html(post.title)}</h1>"
                       f"<h2>{self._escape_html(post.subtitle)}</h2>"
                       f"{post.body_html}")
        else:
            raise ValueError(f"Unknown output format: {output_format}")

        return OutputArtifact(path=self.get_file_path(post.slug, output_format), content=content)

    def write(self, artifact: OutputArtifact) -> Path:
        """
        Write an artifact to disk, replacing any existing file.

        Returns:
            Path of the written file

        Raises:
            WriteError: If the file cannot be written
        """
        self._create_directories()
        try:
            # No newline translation
            with open(artifact.path, 'w', encoding='utf-8', newline='') as f:
                f.write(artifact.content)
        except OSError as e:
            raise WriteError(f"Failed to write {artifact.path}: {e}", path=str(artifact.path)) from e

        file_size = os.path.getsize(artifact.path)
        self.logger.info(f"Saved {artifact.path.name} ({file_size} bytes)")
        return artifact.path

    def save_post(self, post: PostDocument, output_format: str, tag: str) -> Path:
        """Render and write a post in one step."""
        return self.write(self.render(post, output_format, tag))

    def get_output_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the destination folder.

        Returns:
            Dictionary with file counts and sizes per format
        """
        stats: Dict[str, Any] = {'dest_folder': str(self.dest_folder)}
        for ext in self.EXTENSIONS:
            files = list(self.dest_folder.glob(f'*.{ext}')) if self.dest_folder.exists() else []
            stats[f'{ext}_files'] = len(files)
            stats[f'total_{ext}_size'] = sum(f.stat().st_size for f in files)
        return stats

    def _escape_front_matter(self, text: str) -> str:
        """Escape a value for a double-quoted YAML scalar."""
        return text.replace('\\', '\\\\').replace('"', '\\"')

    def _escape_html(self, text: str) -> str:
        """Escape HTML characters."""
        if not isinstance(text, str):
            text = str(text)
        return (text.replace('&', '&amp;')
                   .replace('<', '&lt;')
                   .replace('>', '&gt;')
                   .replace('"', '&quot;')
                   .replace("'", '&#x27;'))
