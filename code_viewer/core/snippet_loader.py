# code_viewer/core/snippet_loader.py

import json
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

# Every record in the data file must carry exactly these fields.
REQUIRED_FIELDS = ("id", "title", "description", "code")

# Matches the leading /** ... */ (or /* ... */) block comment of a source file.
_LEADING_BLOCK_COMMENT = re.compile(r"^\s*/\*\*?(.*?)\*/", re.DOTALL)


class SnippetLoadError(ValueError):
    """Raised when a snippet data source cannot be turned into snippets."""


@dataclass(frozen=True)
class Snippet:
    """
    A single displayable code snippet.

    Snippets are created once at load time and never change afterwards,
    so the same instance can be shared freely between the controller,
    the sidebar model and the code cards.
    """
    id: str
    title: str
    description: str
    code: str

    @classmethod
    def from_dict(cls, data: Dict) -> "Snippet":
        """Builds a snippet from a raw data-file record. Extra keys are ignored."""
        if not isinstance(data, dict):
            raise SnippetLoadError(f"Snippet entry must be an object, got {type(data).__name__}.")
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            label = data.get("id", "<unknown>")
            raise SnippetLoadError(f"Snippet '{label}' is missing field(s): {', '.join(missing)}")
        return cls(**{name: str(data[name]) for name in REQUIRED_FIELDS})

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _ensure_unique(snippets: Iterable[Snippet]) -> List[Snippet]:
    seen = set()
    result = []
    for snippet in snippets:
        if snippet.id in seen:
            raise SnippetLoadError(f"Duplicate snippet id: '{snippet.id}'")
        seen.add(snippet.id)
        result.append(snippet)
    return result


def load_snippets(path: Path) -> List[Snippet]:
    """
    Loads snippets from a JSON data file.

    The file holds a JSON array of objects, each with the fields
    `id`, `title`, `description` and `code`.

    Args:
        path: The path to the JSON data file.

    Returns:
        The snippets, in file order.

    Raises:
        SnippetLoadError: If the file is missing, unreadable, or malformed.
    """
    path = Path(path)
    logger.info(f"Loading snippets from: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise SnippetLoadError(f"Snippet data file not found: {path}")
    except UnicodeDecodeError as e:
        raise SnippetLoadError(f"Snippet data file is not valid UTF-8 JSON ({path}): {e}")
    except json.JSONDecodeError as e:
        raise SnippetLoadError(f"Snippet data file is not valid JSON ({path}): {e}")
    except OSError as e:
        raise SnippetLoadError(f"Could not read snippet data file ({path}): {e}")

    if not isinstance(data, list):
        raise SnippetLoadError(f"Snippet data file must contain a JSON array: {path}")

    snippets = _ensure_unique(Snippet.from_dict(entry) for entry in data)
    logger.info(f"Loaded {len(snippets)} snippets.")
    return snippets


def save_snippets(snippets: Iterable[Snippet], path: Path):
    """Writes snippets to a JSON data file that `load_snippets` can read back."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [snippet.to_dict() for snippet in snippets]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
    logger.info(f"Wrote {len(records)} snippets to: {path}")


def _comment_lines(source: str) -> List[str]:
    """Returns the non-empty text lines of the source's leading block comment."""
    match = _LEADING_BLOCK_COMMENT.match(source)
    if not match:
        return []
    lines = []
    for raw in match.group(1).splitlines():
        # Strip the conventional " * " gutter of JSDoc-style comments.
        line = raw.strip().lstrip("*").strip()
        # Tag lines such as "@description" are metadata, not prose.
        if line and not line.startswith("@"):
            lines.append(line)
    return lines


def snippet_from_source(path: Path) -> Snippet:
    """
    Derives a snippet from a single source file.

    The file stem is the id. The title and description come from the first
    two lines of the leading block comment when there is one.
    """
    path = Path(path)
    code = path.read_text(encoding='utf-8')
    lines = _comment_lines(code)
    title = lines[0] if lines else path.stem
    description = lines[1] if len(lines) > 1 else ""
    return Snippet(id=path.stem, title=title, description=description, code=code)


def load_snippets_from_directory(
        directory: Path,
        pattern: str = "*.js",
        progress: Optional[Callable[[Path], None]] = None
) -> List[Snippet]:
    """
    Builds snippets from every source file in a directory.

    Args:
        directory: The directory to scan (not recursive).
        pattern: Glob pattern selecting the source files.
        progress: Optional callback invoked once per file after it is processed.

    Returns:
        The snippets sorted by file name. Files whose id collides with an
        earlier file are skipped.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise SnippetLoadError(f"Not a directory: {directory}")

    snippets: List[Snippet] = []
    seen_ids = set()
    for source_path in sorted(p for p in directory.glob(pattern) if p.is_file()):
        try:
            snippet = snippet_from_source(source_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable source file '{source_path.name}': {e}")
        else:
            if snippet.id in seen_ids:
                logger.warning(f"Skipping '{source_path.name}': id '{snippet.id}' is already taken.")
            else:
                seen_ids.add(snippet.id)
                snippets.append(snippet)
        if progress:
            progress(source_path)

    logger.info(f"Built {len(snippets)} snippets from: {directory}")
    return snippets
