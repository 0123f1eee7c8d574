"""
Viewer State (Data Model)
=========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the selected files and which one is active in
   one place.
2. Decoupling: Views read from this object; the main window writes to it.

Classes:
    ViewerState: Ordered set of SourceFiles plus the active file id.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from spatialview.model.files import SourceFile

logger = logging.getLogger(__name__)


@dataclass
class ViewerState:
    files: list[SourceFile] = field(default_factory=list)
    active_id: Optional[str] = None

    def add(self, source: SourceFile) -> None:
        self.files.append(source)
        logger.debug(f"Added '{source.name}' ({source.id}).")

    def get(self, file_id: str) -> Optional[SourceFile]:
        for source in self.files:
            if source.id == file_id:
                return source
        return None

    def activate(self, file_id: Optional[str]) -> Optional[SourceFile]:
        """Make a file active; unknown ids clear the selection."""
        source = self.get(file_id) if file_id is not None else None
        self.active_id = source.id if source is not None else None
        return source

    @property
    def active(self) -> Optional[SourceFile]:
        return self.get(self.active_id) if self.active_id is not None else None

    def remove(self, file_id: str) -> Optional[SourceFile]:
        """Drop a file; clears the active id when it was the active one."""
        source = self.get(file_id)
        if source is None:
            return None
        self.files.remove(source)
        if self.active_id == file_id:
            self.active_id = None
        logger.debug(f"Removed '{source.name}' ({source.id}).")
        return source

    def reset(self) -> None:
        """Clear all files"""
        self.files = []
        self.active_id = None
        logger.info("Viewer state has been reset.")
