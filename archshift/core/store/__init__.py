"""
Persistence for workspaces and migration jobs.

Exports:
- WorkspaceStore: document and job-record store over DatabaseManager
- WorkspaceDocument: raw stored document (scope + unparsed graph)
"""

from .workspace_store import WorkspaceDocument, WorkspaceStore

__all__ = [
    "WorkspaceStore",
    "WorkspaceDocument",
]
