import json
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any


logger = logging.getLogger(__name__)


class ElibzArchiveError(Exception):
    pass


@dataclass
class ElibzContents:
    symbol_title: str
    footprint_title: str
    manifest: Dict[str, Any]
    symbol_data: str
    footprint_data: str


class ElibzArchive:
    """Reads the members of an EasyEDA Pro .elibz library archive.

    The archive holds a .json manifest, one .esym symbol and one .efoo
    footprint. Titles come from the first entry of the manifest's
    "symbols" and "footprints" maps, falling back to the archive stem.
    """

    EXTENSION = ".elibz"
    MIN_MEMBERS = 3

    def __init__(self, archive_path: str):
        self.path = Path(archive_path)

    def read(self) -> ElibzContents:
        if not self.path.exists():
            raise ElibzArchiveError(f"File not found: {self.path}")

        if self.path.suffix.lower() != self.EXTENSION:
            raise ElibzArchiveError(f"Not an {self.EXTENSION} file: {self.path}")

        logger.info(f"Reading archive: {self.path}")

        try:
            with zipfile.ZipFile(self.path) as archive:
                return self._read_members(archive)
        except zipfile.BadZipFile as e:
            raise ElibzArchiveError(f"Cannot open archive {self.path}: {e}")

    def _read_members(self, archive: zipfile.ZipFile) -> ElibzContents:
        names = archive.namelist()
        if len(names) < self.MIN_MEMBERS:
            raise ElibzArchiveError(
                f"Archive has {len(names)} members, expected at least {self.MIN_MEMBERS}"
            )

        members = {
            ".json": self._find_member(names, ".json"),
            ".efoo": self._find_member(names, ".efoo"),
            ".esym": self._find_member(names, ".esym"),
        }
        missing = [ext for ext, name in members.items() if name is None]
        if missing:
            raise ElibzArchiveError(
                f"Archive is missing required members: {', '.join(missing)}"
            )

        try:
            manifest_text = archive.read(members[".json"]).decode("utf-8")
            symbol_data = archive.read(members[".esym"]).decode("utf-8")
            footprint_data = archive.read(members[".efoo"]).decode("utf-8")
        except (KeyError, UnicodeDecodeError, zipfile.BadZipFile) as e:
            raise ElibzArchiveError(f"Cannot read archive member: {e}")

        try:
            manifest = json.loads(manifest_text)
        except json.JSONDecodeError as e:
            raise ElibzArchiveError(f"Cannot parse manifest {members['.json']}: {e}")

        if not isinstance(manifest, dict):
            raise ElibzArchiveError("Manifest is not a JSON object")

        default_title = self.path.stem
        contents = ElibzContents(
            symbol_title=self._first_title(manifest, "symbols") or default_title,
            footprint_title=self._first_title(manifest, "footprints") or default_title,
            manifest=manifest,
            symbol_data=symbol_data,
            footprint_data=footprint_data,
        )

        logger.info(
            f"Archive {self.path.name}: symbol '{contents.symbol_title}', "
            f"footprint '{contents.footprint_title}'"
        )
        return contents

    def _find_member(self, names, extension: str) -> Optional[str]:
        found = None
        for name in names:
            if name.lower().endswith(extension):
                found = name
        return found

    def _first_title(self, manifest: Dict[str, Any], section: str) -> Optional[str]:
        entries = manifest.get(section)
        if not isinstance(entries, dict) or not entries:
            return None

        first = next(iter(entries.values()))
        if isinstance(first, dict):
            title = first.get("display_title")
            if isinstance(title, str) and title:
                return title
        return None
