"""Template loaders for Ledge environment.

Loaders provide template source to the Environment. They implement
`get_source(reference)` returning `(source, filename)`, where `reference`
is a template reference such as ``users::list`` or ``layouts.main``.

Built-in Loaders:
- `DiskLoader`: Load from named disks (directories) on the filesystem
- `DictLoader`: Load from in-memory dictionary (testing/embedded)

Both resolve references through `extract_disk_and_template_name()`, so
``list``, ``default::list`` and ``list.edge`` all name the same template.

Custom Loaders:
Implement the Loader protocol:
    ```python
    class DatabaseLoader:
        def get_source(self, reference: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE ref = ?", reference)
            if not row:
                raise TemplateNotFoundError(f"Template '{reference}' not found")
            return row.source, f"db://{reference}"
    ```

Thread-Safety:
`get_source()` is safe for concurrent calls. Mounting and unmounting disks
while templates are being loaded from another thread is not.

"""

from __future__ import annotations

from difflib import get_close_matches
from pathlib import Path
from typing import Protocol

from ledge.environment.exceptions import TemplateNotFoundError
from ledge.utils.paths import DEFAULT_DISK, DISK_SEPARATOR, extract_disk_and_template_name


class Loader(Protocol):
    """Protocol for template loaders."""

    def get_source(self, reference: str) -> tuple[str, str | None]: ...


def _not_found(reference: str, available: list[str]) -> TemplateNotFoundError:
    msg = f"Template '{reference}' not found"
    matches = get_close_matches(reference, available, n=1, cutoff=0.6)
    if matches:
        msg += f". Did you mean '{matches[0]}'?"
    elif available:
        msg += f". Available: {', '.join(available[:10])}"
        if len(available) > 10:
            msg += f" ... ({len(available)} total)"
    return TemplateNotFoundError(msg)


class DiskLoader:
    """Load templates from named disks on the filesystem.

    A disk is a directory mounted under a name. References select the disk
    with a ``disk::`` prefix; references without one use the ``default``
    disk.

    Attributes:
        _disks: Dict mapping disk name → directory
        _encoding: File encoding (default: utf-8)

    Example:
            >>> loader = DiskLoader("views/")
            >>> loader.mount("admin", "admin/views/")
            >>> loader.resolve("admin::users.list")
            PosixPath('admin/views/users/list.edge')
            >>> source, filename = loader.get_source("home")
            >>> filename
            'views/home.edge'

    Raises:
        TemplateNotFoundError: If the disk is not mounted or the file is missing

    """

    __slots__ = ("_disks", "_encoding")

    def __init__(
        self,
        disks: str | Path | dict[str, str | Path] | None = None,
        encoding: str = "utf-8",
    ):
        if isinstance(disks, (str, Path)):
            disks = {DEFAULT_DISK: disks}
        self._disks: dict[str, Path] = {name: Path(path) for name, path in (disks or {}).items()}
        self._encoding = encoding

    @property
    def disks(self) -> dict[str, Path]:
        """Mounted disks (a copy)."""
        return dict(self._disks)

    def mount(self, name: str, path: str | Path) -> None:
        """Mount a directory as disk `name`, replacing any previous mount."""
        self._disks[name] = Path(path)

    def unmount(self, name: str) -> None:
        """Remove disk `name`; unknown names are ignored."""
        self._disks.pop(name, None)

    def resolve(self, reference: str) -> Path:
        """Return the file path a reference points to.

        Raises:
            TemplateNotFoundError: If the reference names an unmounted disk
        """
        disk, template_path = extract_disk_and_template_name(reference)
        base = self._disks.get(disk)
        if base is None:
            mounted = ", ".join(sorted(self._disks)) or "none"
            raise TemplateNotFoundError(
                f"Template '{reference}' not found: disk '{disk}' is not mounted "
                f"(mounted: {mounted})"
            )
        return base / template_path

    def get_source(self, reference: str) -> tuple[str, str]:
        """Load template source from disk."""
        path = self.resolve(reference)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template '{reference}' not found at {path}")
        return path.read_text(self._encoding), str(path)

    def list_templates(self) -> list[str]:
        """List all ``.edge`` templates as references.

        Only the first directory level becomes a dot (``a/b/c.edge`` is
        ``a.b/c``). Files no reference resolves to are left out.
        """
        templates = set()
        for name, base in self._disks.items():
            if not base.is_dir():
                continue
            for path in base.rglob("*.edge"):
                relative = path.relative_to(base)
                reference = relative.with_suffix("").as_posix().replace("/", ".", 1)
                if Path(extract_disk_and_template_name(reference)[1]) != relative:
                    continue
                templates.add(reference if name == DEFAULT_DISK else f"{name}{DISK_SEPARATOR}{reference}")
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps template references to source strings. Useful for testing,
    embedded templates, or dynamically generated templates. Keys are
    normalized like references, so ``users::list`` and ``users::list.edge``
    name the same entry.

    Attributes:
        _mapping: Dict mapping normalized (disk, path) → source string
        _references: Original keys, for error suggestions

    Example:
            >>> loader = DictLoader({
            ...     "layouts.main": "<main>\\n@section('body')\\n@end\\n</main>",
            ...     "home": "@layout('layouts.main')\\n@section('body')\\nHi\\n@end\\n",
            ... })
            >>> env = Environment(loader=loader)
            >>> env.get_template("home").render()
            '<main>\\nHi\\n</main>'

    Raises:
        TemplateNotFoundError: If reference not in mapping

    """

    __slots__ = ("_mapping", "_references")

    def __init__(self, mapping: dict[str, str]):
        self._mapping = {extract_disk_and_template_name(ref): source for ref, source in mapping.items()}
        self._references = sorted(mapping)

    def get_source(self, reference: str) -> tuple[str, str]:
        key = extract_disk_and_template_name(reference)
        if key not in self._mapping:
            raise _not_found(reference, self._references)
        disk, template_path = key
        return self._mapping[key], f"{disk}{DISK_SEPARATOR}{template_path}"

    def list_templates(self) -> list[str]:
        return list(self._references)
