"""
stackmirror: Incremental Substack Archive Mirror

A utility for walking a Substack publication's archive listing, fetching
every post newer than a cutoff date, and writing each one to a local HTML
or Markdown file for offline archival.
"""

__version__ = "1.0"
__author__ = "stackmirror Project"
__description__ = "Incremental Substack Archive Mirror"
