from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote


@dataclass(frozen=True)
class FileEntry:
    name: str
    thumb_url: Optional[str] = None


@dataclass
class FolderNode:
    name: str
    path: str
    children: List['FolderNode'] = field(default_factory=list)
    files: List[FileEntry] = field(default_factory=list)
    loaded: bool = False
    error: Optional[str] = None

    def file_url(self, entry: FileEntry) -> str:
        return self.path + quote(entry.name)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'path': self.path,
            'loaded': self.loaded,
            'folders': [{'name': c.name, 'path': c.path} for c in self.children],
            'files': [{'name': f.name, 'thumb': f.thumb_url or self.file_url(f)} for f in self.files],
        }


@dataclass
class Listing:
    files: List[FileEntry] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)
    # 'index', 'html', 'images' or 'none'
    source: str = 'none'
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ArchiveTask:
    source_folder_path: str
    file_name: str
    folder_label: str

    @property
    def url(self) -> str:
        return self.source_folder_path + quote(self.file_name)


@dataclass
class ArchiveResult:
    data: bytes
    filename: str
    packed: List[str] = field(default_factory=list)
    failed: List[ArchiveTask] = field(default_factory=list)
