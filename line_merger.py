#!/usr/bin/env python3
"""
Line Merger - Streaming multi-file line merger
Merges an ordered list of text files into one output file, one line at a time

Processing Features:
- Ordered per-line transform steps (separator normalization, trimming,
  credential extraction, keyword filtering, empty-line removal)
- BOM-aware decoding of every input file
- Cooperative cancellation at file and line boundaries
- Periodic progress snapshots for an external observer
"""

import argparse
import asyncio
import codecs
import logging
import re
import signal
import sys
import threading
import time
import traceback
from contextlib import closing, contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union


# Async helper for running blocking I/O in thread pool
async def run_in_thread(func: Callable[..., Any], *args, **kwargs) -> Any:
    """Run a blocking function in a worker thread so the event loop stays free."""
    return await asyncio.to_thread(func, *args, **kwargs)


try:
    from rich.console import Console
    from rich.progress import (
        Progress,
        SpinnerColumn,
        TextColumn,
        BarColumn,
        TimeElapsedColumn,
        MofNCompleteColumn,
    )

    HAS_RICH = True
except ImportError:
    HAS_RICH = False
    Console = None
    Progress = None

try:
    from tqdm import tqdm

    HAS_TQDM = True
except ImportError:
    HAS_TQDM = False
    tqdm = None


__version__ = "1.0.0"
__author__ = "Line Merger Project"
__license__ = "MIT"

# Snapshot cadence, counted against lines read
PROGRESS_INTERVAL = 5000
DEFAULT_BUFFER_SIZE = 1024 * 1024

_SIZE_PATTERN = re.compile(r"^(\d*\.?\d+)([KMG]?)B?$")
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SEPARATOR_TABLE = str.maketrans({"|": ":", ";": ":", ",": ":"})

BLOCKED_USERNAME_PREFIXES = ("http", "www.")
BLOCKED_USERNAME_FRAGMENTS = (".com/", ".net/", ".org/")

# UTF-32 LE must be checked before UTF-16 LE, they share the first two bytes
_BOM_ENCODINGS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)

logger = logging.getLogger("line_merger")


class AdvancedMode(str, Enum):
    """Keyword filter sub-mode"""

    FILTER = "filter"
    REMOVE = "remove"


class MergeStatus(str, Enum):
    """Terminal outcome of a host-level merge"""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


def normalize_keywords(keywords: Iterable[str], ignore_case: bool = True) -> Tuple[str, ...]:
    """Trim keywords, drop blank ones and de-duplicate them keeping first occurrence"""
    seen = set()
    result = []
    for keyword in keywords:
        keyword = keyword.strip()
        if not keyword:
            continue
        key = keyword.lower() if ignore_case else keyword
        if key in seen:
            continue
        seen.add(key)
        result.append(keyword)
    return tuple(result)


def add_keyword(keywords: List[str], keyword: str, ignore_case: bool = True) -> List[str]:
    """
    Append a keyword to an ordered keyword list.

    Raises:
        ValueError: If the keyword is blank or already present under the
            active comparison
    """
    keyword = keyword.strip()
    if not keyword:
        raise ValueError("Keyword must not be blank")

    key = keyword.lower() if ignore_case else keyword
    for existing in keywords:
        if (existing.lower() if ignore_case else existing) == key:
            raise ValueError(f"Keyword already present: {existing}")

    keywords.append(keyword)
    return keywords


@dataclass(frozen=True)
class MergeOptions:
    """Immutable line processing options, built once per run"""

    advanced_enabled: bool = False
    advanced_mode: AdvancedMode = AdvancedMode.FILTER
    ignore_case: bool = True
    keywords: Tuple[str, ...] = ()
    strip_credential: bool = False
    trim_whitespace: bool = False
    remove_empty_lines: bool = False
    normalize_separators: bool = False

    def __post_init__(self):
        object.__setattr__(self, "advanced_mode", AdvancedMode(self.advanced_mode))
        object.__setattr__(
            self, "keywords", normalize_keywords(self.keywords, self.ignore_case)
        )

    @classmethod
    def from_config(cls, config: Dict) -> "MergeOptions":
        """Build options from a plain config dictionary"""
        mode = config.get("advanced_mode", AdvancedMode.FILTER)
        if not isinstance(mode, AdvancedMode):
            mode = str(mode).strip().lower()

        keywords = config.get("keywords") or ()
        if isinstance(keywords, str):
            keywords = (keywords,)

        return cls(
            advanced_enabled=bool(config.get("advanced_enabled", False)),
            advanced_mode=mode,
            ignore_case=bool(config.get("ignore_case", True)),
            keywords=tuple(keywords),
            strip_credential=bool(config.get("strip_credential", False)),
            trim_whitespace=bool(config.get("trim_whitespace", False)),
            remove_empty_lines=bool(config.get("remove_empty_lines", False)),
            normalize_separators=bool(config.get("normalize_separators", False)),
        )


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time merge progress"""

    current_file_index: int
    total_files: int
    lines_read: int
    lines_written: int


class LineMergerError(Exception):
    """Base exception for line merger errors"""

    pass


class MergeIOError(LineMergerError):
    """An input or output file could not be opened, read or written"""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = Path(path)


class PreconditionError(LineMergerError):
    """The merge request was rejected before the pipeline started"""

    pass


class MergeCancelled(Exception):
    """The merge was stopped by a cancellation request"""

    pass


def normalize_separators(line: str) -> str:
    """Replace every '|', ';' and ',' with ':'"""
    return line.translate(_SEPARATOR_TABLE)


def _has_whitespace(value: str) -> bool:
    return any(char.isspace() for char in value)


def is_likely_email(value: str) -> bool:
    """True for a value with an '@' that is followed later by a plausible '.'"""
    at_index = value.find("@")
    if at_index <= 0 or at_index == len(value) - 1:
        return False

    # find() returns -1 when no dot follows the '@'
    dot_index = value.find(".", at_index + 1)
    if dot_index <= at_index + 1 or dot_index >= len(value) - 1:
        return False

    return True


def is_likely_username(value: str) -> bool:
    """True for a value that does not look like a URL or a path"""
    if len(value) < 3:
        return False

    if "/" in value or "\\" in value:
        return False

    lower = value.lower()
    if lower.startswith(BLOCKED_USERNAME_PREFIXES):
        return False

    if any(fragment in lower for fragment in BLOCKED_USERNAME_FRAGMENTS):
        return False

    return True


def is_likely_credential(user: str, password: str) -> bool:
    """Decide whether an adjacent token pair is a plausible user:password"""
    if not user.strip() or not password.strip():
        return False

    if _has_whitespace(user) or _has_whitespace(password):
        return False

    for token in (user, password):
        if "/" in token or "\\" in token:
            return False

    if is_likely_email(user):
        return len(password) >= 2

    return is_likely_username(user) and len(password) >= 2


def extract_credential(line: str) -> Optional[str]:
    """
    Pull a user:password pair out of a ':'-delimited line.

    Adjacent pairs are scanned from the rightmost toward the leftmost, so
    leading site or URL segments lose against the credential after them:
    "http://site.com:user:pass" yields "user:pass".

    Returns:
        "user:password" for the first plausible pair, or None when the line
        holds no plausible pair
    """
    if not line.strip():
        return None

    parts = line.split(":")
    if len(parts) < 2:
        return None

    for index in range(len(parts) - 2, -1, -1):
        user = parts[index].strip()
        password = parts[index + 1].strip()
        if is_likely_credential(user, password):
            return f"{user}:{password}"

    return None


class LineTransformer:
    """Applies the enabled transform steps to one line at a time"""

    def __init__(self, options: MergeOptions):
        self.options = options
        if options.ignore_case:
            self._needles = tuple(keyword.lower() for keyword in options.keywords)
        else:
            self._needles = options.keywords
        self.steps: List[Callable[[str], Optional[str]]] = self._build_steps()

    def _build_steps(self) -> List[Callable[[str], Optional[str]]]:
        """Ordered steps; each one returns the new line or None to drop it"""
        steps = []
        if self.options.normalize_separators:
            steps.append(normalize_separators)
        if self.options.trim_whitespace:
            steps.append(str.strip)
        if self.options.strip_credential:
            steps.append(extract_credential)
        if self.options.advanced_enabled:
            steps.append(self._filter_keywords)
        if self.options.remove_empty_lines:
            steps.append(self._drop_empty)
        return steps

    def transform(self, line: str) -> Optional[str]:
        """Run a line through every enabled step, None means it is dropped"""
        for step in self.steps:
            line = step(line)
            if line is None:
                return None
        return line

    def contains_keyword(self, line: str) -> bool:
        """Substring match against any keyword, stopping at the first hit"""
        haystack = line.lower() if self.options.ignore_case else line
        return any(needle in haystack for needle in self._needles)

    def _filter_keywords(self, line: str) -> Optional[str]:
        keep_matches = self.options.advanced_mode is AdvancedMode.FILTER
        if not self._needles:
            # Nothing can match: filter keeps nothing, remove keeps everything
            return None if keep_matches else line

        if self.contains_keyword(line) == keep_matches:
            return line
        return None

    @staticmethod
    def _drop_empty(line: str) -> Optional[str]:
        return line if line else None


def detect_bom_encoding(path: Union[str, Path]) -> str:
    """Pick a decoder from the file's byte-order mark, UTF-8 when there is none"""
    with open(path, "rb") as f:
        head = f.read(4)

    for bom, encoding in _BOM_ENCODINGS:
        if head.startswith(bom):
            return encoding
    return "utf-8"


def _iter_lines(path: Path, buffer_size: int) -> Iterator[str]:
    """Yield the lines of one input file without their terminators"""
    try:
        encoding = detect_bom_encoding(path)
        with open(
            path, "r", encoding=encoding, errors="replace", buffering=buffer_size
        ) as f:
            for line in f:
                yield line[:-1] if line.endswith("\n") else line
    except OSError as e:
        raise MergeIOError(f"Cannot read {path}: {e}", path) from e


def merge(
    output_path: Union[str, Path],
    input_paths: Iterable[Union[str, Path]],
    options: MergeOptions,
    is_cancelled: Optional[Callable[[], bool]] = None,
    progress: Optional[Callable[[ProgressSnapshot], None]] = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> ProgressSnapshot:
    """
    Merge input files line by line into output_path.

    Files are read strictly in the given order. Cancellation is checked before
    each file and before each line; a snapshot is sent to ``progress`` at the
    start of every file, every PROGRESS_INTERVAL lines read and once at the end.

    Args:
        output_path: File to create or truncate
        input_paths: Ordered input files
        options: Line processing options
        is_cancelled: Polled at every checkpoint, True stops the merge
        progress: Receives ProgressSnapshot values
        buffer_size: I/O buffer size in bytes

    Returns:
        The final snapshot

    Raises:
        MergeCancelled: If is_cancelled returned True; written lines are kept
        MergeIOError: If a file could not be opened, read or written
    """
    output_path = Path(output_path)
    paths = [Path(p) for p in input_paths]
    total_files = len(paths)
    transformer = LineTransformer(options)
    lines_read = 0
    lines_written = 0

    def check_cancelled():
        if is_cancelled is not None and is_cancelled():
            raise MergeCancelled(f"Merge cancelled after {lines_read} lines read")

    def emit(file_index: int):
        if progress is not None:
            progress(ProgressSnapshot(file_index, total_files, lines_read, lines_written))

    def write(text: str):
        try:
            out.write(text)
        except OSError as e:
            raise MergeIOError(f"Cannot write {output_path}: {e}", output_path) from e

    try:
        out = open(output_path, "w", encoding="utf-8", buffering=buffer_size)
    except OSError as e:
        raise MergeIOError(f"Cannot create {output_path}: {e}", output_path) from e

    try:
        for file_index, input_path in enumerate(paths, 1):
            check_cancelled()
            emit(file_index)
            logger.debug(f"Merging {input_path} ({file_index}/{total_files})")

            with closing(_iter_lines(input_path, buffer_size)) as lines:
                for line in lines:
                    check_cancelled()
                    lines_read += 1

                    kept = transformer.transform(line)
                    if kept is not None:
                        write(kept + "\n")
                        lines_written += 1

                    if lines_read % PROGRESS_INTERVAL == 0:
                        emit(file_index)
    finally:
        # Buffered lines are flushed here, so close failures belong to the output
        try:
            out.close()
        except OSError as e:
            raise MergeIOError(f"Cannot write {output_path}: {e}", output_path) from e

    final = ProgressSnapshot(total_files, total_files, lines_read, lines_written)
    if progress is not None:
        progress(final)
    return final


def validate_merge_request(input_paths: List, options: MergeOptions) -> None:
    """Reject requests the pipeline should never be started with"""
    if not input_paths:
        raise PreconditionError("Select at least one input file")

    if options.advanced_enabled and not options.keywords:
        raise PreconditionError("Advanced mode needs at least one keyword")


def dedupe_paths(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """Drop repeated selections of the same path, keeping first-seen order"""
    seen = set()
    result = []
    for path in paths:
        path = Path(path)
        if path in seen:
            continue
        seen.add(path)
        result.append(path)
    return result


def format_progress(snapshot: ProgressSnapshot) -> str:
    """Human-readable status line for a snapshot"""
    return (
        f"Processing file {snapshot.current_file_index}/{snapshot.total_files}. "
        f"Lines read: {snapshot.lines_read:,}. "
        f"Lines written: {snapshot.lines_written:,}."
    )


class LineMerger:
    """Host-side merge runner with logging, progress display and cancellation"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

        # Initialize rich console
        self.console = Console() if HAS_RICH else None

        self.logger = self._setup_logging()

        self.options = MergeOptions.from_config(self.config)

        self.buffer_size = self._parse_size(self.config.get("buffer_size", "1M"))
        if self.buffer_size <= 0:
            self.buffer_size = DEFAULT_BUFFER_SIZE

        self.force = self.config.get("force", False)
        self.verbose = self.config.get("verbose", False)

        # TTY detection for progress bars (disable in non-interactive terminals like CI/CD)
        self.is_tty = sys.stdout.isatty()

        self._cancel_event = threading.Event()
        self.last_snapshot: Optional[ProgressSnapshot] = None

        # Statistics
        self.stats = {
            "files_total": 0,
            "lines_read": 0,
            "lines_written": 0,
            "elapsed": 0.0,
        }

    def _setup_logging(self) -> logging.Logger:
        """Attach one stderr handler to the shared logger, level from ``verbose``"""
        logger.setLevel(logging.DEBUG if self.config.get("verbose") else logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            logger.addHandler(handler)

        return logger

    def _setup_signal_handlers(self) -> Dict[int, Any]:
        """Route interrupt signals to cancellation, returning the previous handlers"""

        def signal_handler(signum, frame):
            """Request cooperative cancellation"""
            self.logger.warning("Received interrupt signal, cancelling merge...")
            self.cancel()

        previous = {}
        # Only setup handlers for signals available on current platform
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                previous[signum] = signal.signal(signum, signal_handler)
            except (ValueError, OSError):
                # Signal handling is only possible from the main thread
                pass
        return previous

    def _restore_signal_handlers(self, previous: Dict[int, Any]) -> None:
        for signum, handler in previous.items():
            try:
                signal.signal(signum, handler)
            except (ValueError, OSError, TypeError):
                pass

    def _parse_size(self, size: Union[str, int]) -> int:
        """Turn a buffer size such as 65536, "64K" or "1.5MB" into bytes"""
        if isinstance(size, int) and not isinstance(size, bool):
            return size
        if not isinstance(size, str):
            raise ValueError(f"Size must be a string or int, got {type(size)}")

        match = _SIZE_PATTERN.match(size.strip().upper())
        if not match:
            raise ValueError(f"Invalid size format: {size!r}")

        number, unit = match.groups()
        return int(float(number) * _SIZE_UNITS[unit])

    def _format_size(self, size: int) -> str:
        """Output size for the summary log line"""
        if size < 0:
            return "0B"

        for unit in ("B", "KB", "MB"):
            if size < 1024.0:
                return f"{size:.1f}{unit}"
            size /= 1024.0
        return f"{size:.1f}GB"

    def cancel(self) -> None:
        """Ask a running merge to stop at its next checkpoint"""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called; cleared when the next merge starts"""
        return self._cancel_event.is_set()

    @contextmanager
    def _progress_reporter(self, total_files: int, progress: bool):
        """Yield a progress sink rendering snapshots with rich, tqdm or plain text"""
        # Disable rich/tqdm progress bars in non-TTY environments (CI/CD)
        use_rich_progress = progress and HAS_RICH and self.console and self.is_tty
        use_tqdm_progress = progress and HAS_TQDM and self.is_tty and not use_rich_progress

        if use_rich_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self.console,
            ) as progress_bar:
                task = progress_bar.add_task("Merging files", total=total_files)

                def report(snapshot: ProgressSnapshot):
                    self.last_snapshot = snapshot
                    progress_bar.update(
                        task,
                        completed=snapshot.current_file_index - 1,
                        description=(
                            f"Read {snapshot.lines_read:,} / "
                            f"wrote {snapshot.lines_written:,} lines"
                        ),
                    )

                yield report
                progress_bar.update(task, completed=total_files)
        elif use_tqdm_progress:
            pbar = tqdm(total=total_files, desc="Merging files", unit="files")

            def report(snapshot: ProgressSnapshot):
                self.last_snapshot = snapshot
                pbar.n = snapshot.current_file_index - 1
                pbar.set_postfix(
                    read=snapshot.lines_read, written=snapshot.lines_written
                )

            try:
                yield report
                pbar.n = total_files
                pbar.refresh()
            finally:
                pbar.close()
        elif progress:

            def report(snapshot: ProgressSnapshot):
                self.last_snapshot = snapshot
                print(format_progress(snapshot))

            yield report
        else:

            def report(snapshot: ProgressSnapshot):
                self.last_snapshot = snapshot

            yield report

    async def merge_files(
        self,
        output_path: Union[str, Path],
        input_paths: Iterable[Union[str, Path]],
        progress: bool = True,
    ) -> MergeStatus:
        """Validate the request, run the merge in a worker thread and report the outcome"""
        output_path = Path(output_path)
        paths = [Path(p) for p in input_paths]

        self._cancel_event.clear()
        self.last_snapshot = None
        previous_handlers = self._setup_signal_handlers()
        try:
            validate_merge_request(paths, self.options)

            if output_path.exists() and not self.force:
                raise LineMergerError(
                    f"Output file already exists (use --force to overwrite): {output_path}"
                )
            if output_path.is_dir():
                raise LineMergerError(f"Output path is a directory: {output_path}")

            output_parent = output_path.parent
            if not output_parent.exists():
                output_parent.mkdir(parents=True, exist_ok=True)

            self.logger.info(f"Merging {len(paths)} files into {output_path}")
            start_time = time.time()

            with self._progress_reporter(len(paths), progress) as report:
                final = await run_in_thread(
                    merge,
                    output_path,
                    paths,
                    self.options,
                    self._cancel_event.is_set,
                    report,
                    self.buffer_size,
                )

            elapsed = time.time() - start_time
            self.stats = {
                "files_total": final.total_files,
                "lines_read": final.lines_read,
                "lines_written": final.lines_written,
                "elapsed": elapsed,
            }
            self.logger.info(f"Successfully merged {final.total_files} files")
            self.logger.info(
                f"Lines read: {final.lines_read:,}, lines written: {final.lines_written:,}"
            )
            self.logger.info(f"Output size: {self._format_size(output_path.stat().st_size)}")
            self.logger.info(f"Processing time: {elapsed:.2f}s")
            self.logger.info(f"Output: {output_path}")
            return MergeStatus.SUCCESS

        except MergeCancelled:
            if self.last_snapshot is not None:
                self.stats["lines_read"] = self.last_snapshot.lines_read
                self.stats["lines_written"] = self.last_snapshot.lines_written
            self.logger.warning(f"Merge cancelled, partial output left at {output_path}")
            return MergeStatus.CANCELLED
        except LineMergerError as e:
            self.logger.error(f"Failed to merge files: {e}")
            if self.verbose:
                self.logger.error(traceback.format_exc())
            return MergeStatus.FAILED
        finally:
            self._restore_signal_handlers(previous_handlers)


def create_config_file(config_path: Path) -> bool:
    """Create a default configuration file"""
    default_config = """# Line Merger Configuration
# Uncomment and modify values as needed

# Keyword filtering ("advanced mode")
# advanced_mode "filter" keeps matching lines, "remove" drops them
# advanced_enabled = false
# advanced_mode = "filter"
# ignore_case = true
# keywords = ["example", "sample"]

# Line transforms, applied in this order
# normalize_separators = false
# trim_whitespace = false
# strip_credential = false
# remove_empty_lines = false

# Buffer size for file I/O operations (e.g. "64K", "1M")
# buffer_size = "1M"

# verbose = false
"""

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            f.write(default_config)
        return True
    except (OSError, PermissionError) as e:
        print(f"Error creating config file: {e}")
        return False


def _parse_config_value(raw: str) -> Any:
    """Booleans, integers, ["a", "b"] lists, or a string with its quotes removed"""
    value = raw.strip()
    if value.startswith("[") and value.endswith("]"):
        items = (item.strip().strip("\"'") for item in value[1:-1].split(","))
        return [item for item in items if item]

    value = value.strip("\"'")
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value


def load_config_file(config_path: Path) -> Dict:
    """Read ``key = value`` lines, skipping blanks, comments and malformed lines"""
    if not config_path.exists():
        return {}

    config = {}
    try:
        lines = config_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read config file {config_path}: {e}")
        return config

    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            logger.warning(f"Ignoring config line {line_num}: {line!r}")
            continue

        key, raw = line.split("=", 1)
        config[key.strip()] = _parse_config_value(raw)

    return config


async def main():
    """Main entry point with comprehensive error handling"""
    parser = argparse.ArgumentParser(
        description="Merge text files line by line with optional filtering and cleanup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plain concatenation, one line per output line
  %(prog)s merged.txt part1.txt part2.txt

  # Keep only lines mentioning a keyword (case-insensitive)
  %(prog)s merged.txt *.txt -k gmail -k yahoo

  # Drop lines mentioning a keyword, case-sensitive
  %(prog)s merged.txt *.txt -k TEST --mode remove --case-sensitive

  # Normalize '|', ';' and ',' to ':' and keep only the user:password pair
  %(prog)s combo.txt dump1.txt dump2.txt --normalize-separators --strip-credential

  # Trim lines and drop the ones left empty, overwriting the output
  %(prog)s clean.txt raw.txt --trim --remove-empty -f
        """,
    )

    parser.add_argument("output_path", nargs="?", help="Output file")
    parser.add_argument("input_paths", nargs="*", help="Input files, merged in order")

    # Keyword filtering
    parser.add_argument(
        "-k", "--keyword", action="append", default=[],
        help="Keyword for advanced filtering. Can be used multiple times."
    )
    parser.add_argument(
        "-m", "--mode", choices=[m.value for m in AdvancedMode], default=None,
        help="Keyword mode: keep matching lines (filter) or drop them (remove)"
    )
    parser.add_argument(
        "--case-sensitive", action="store_true", help="Match keywords case-sensitively"
    )

    # Transforms
    parser.add_argument(
        "--normalize-separators", action="store_true",
        help="Replace '|', ';' and ',' with ':'"
    )
    parser.add_argument(
        "--trim", action="store_true", help="Strip leading and trailing whitespace"
    )
    parser.add_argument(
        "--strip-credential", action="store_true",
        help="Keep only the user:password pair of each line, dropping lines without one"
    )
    parser.add_argument(
        "--remove-empty", action="store_true", help="Drop lines that end up empty"
    )

    # Basic options
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite existing output file"
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable progress display"
    )
    parser.add_argument("--buffer-size", default=None, help="I/O buffer size")

    # Configuration
    parser.add_argument(
        "--config",
        type=Path,
        default=Path.home() / ".config" / "line-merger" / "config",
        help="Configuration file path",
    )
    parser.add_argument(
        "--create-config", action="store_true", help="Create default config"
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args()

    try:
        # Handle config creation
        if args.create_config:
            if create_config_file(args.config):
                print(f"Created default configuration file: {args.config}")
            else:
                print(f"Failed to create configuration file: {args.config}")
                return 1
            return 0

        if not args.output_path or not args.input_paths:
            parser.error("output_path and at least one input path are required")

        # Load configuration
        config = load_config_file(args.config)

        # Command line flags override the config file
        if args.keyword:
            ignore_case = not args.case_sensitive and config.get("ignore_case", True)
            keywords = config.get("keywords") or []
            keywords = [keywords] if isinstance(keywords, str) else list(keywords)
            # Blank or repeated -k values are rejected with exit code 1
            for keyword in args.keyword:
                add_keyword(keywords, keyword, ignore_case)
            config["keywords"] = keywords
            config["advanced_enabled"] = True
        if args.mode:
            config["advanced_mode"] = args.mode
        if args.case_sensitive:
            config["ignore_case"] = False
        for flag, key in (
            (args.normalize_separators, "normalize_separators"),
            (args.trim, "trim_whitespace"),
            (args.strip_credential, "strip_credential"),
            (args.remove_empty, "remove_empty_lines"),
            (args.verbose, "verbose"),
            (args.force, "force"),
        ):
            if flag:
                config[key] = True
        if args.buffer_size:
            config["buffer_size"] = args.buffer_size

        merger = LineMerger(config)
        input_paths = dedupe_paths(args.input_paths)
        if len(input_paths) != len(args.input_paths):
            merger.logger.debug("Skipped repeated input paths")

        status = await merger.merge_files(
            args.output_path, input_paths, progress=not args.no_progress
        )

        if status is MergeStatus.CANCELLED:
            print("\nOperation cancelled by user", file=sys.stderr)
            return 130
        return 0 if status is MergeStatus.SUCCESS else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except (LineMergerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1


def cli_main():
    """Synchronous entry point for console scripts"""
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(cli_main())
