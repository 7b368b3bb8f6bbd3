#!/usr/bin/env python3
# pyright: basic

import argparse
import logging
import os
import pathlib
import re
import shutil
import sys
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
import requests
from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

BASE_URL = "https://adventofcode.com"
REQUEST_TIMEOUT = 30

# Puzzles unlock at midnight US Eastern
RELEASE_TZ = timezone(timedelta(hours=-5))

TEMPLATE_TOKEN = re.compile(r"(day)00", re.IGNORECASE)
DESCRIPTION_FILE = "README.md"
DEFAULT_INPUT_FILE = "input.txt"


class ScaffoldError(Exception):
    """Base class for everything that aborts a setup or update run."""


class TemplateCopyError(ScaffoldError):
    pass


class SubstitutionError(ScaffoldError):
    pass


class FetchError(ScaffoldError):
    pass


class HttpError(FetchError):
    def __init__(self, status: int, url: str):
        super().__init__(f"GET {url} failed with status {status}")
        self.status = status
        self.url = url


class ConversionError(ScaffoldError):
    pass


class FilesystemWriteError(ScaffoldError):
    pass


def pad_day(day: int) -> str:
    """Render a day number as the two-digit string used in paths."""
    if not 1 <= day <= 99:
        raise ValueError(f"Day must be between 1 and 99, got {day}")
    return f"{day:02d}"


def today() -> datetime:
    return datetime.now(RELEASE_TZ)


def merge_dir(src: pathlib.Path, dst: pathlib.Path) -> None:
    """Move everything in src into the existing dst, replacing files, then drop src."""
    for child in list(src.iterdir()):
        target = dst / child.name
        if child.is_dir() and not child.is_symlink() and target.is_dir():
            merge_dir(child, target)
        else:
            child.replace(target)
    src.rmdir()


def rewrite_tree(root: pathlib.Path, pattern: re.Pattern,
                 to: Callable[[re.Match], str], replace: bool = False) -> List[pathlib.Path]:
    """Replace pattern matches in file contents and names below root.

    Only files whose content or name actually matches are touched. Contents
    that are not valid UTF-8 are left alone, as are symlinks, so nothing
    outside root can be written through a link. A rename onto an existing
    path fails unless replace is set, in which case files are overwritten and
    directories merged. Returns the rewritten and renamed paths.
    """
    changed = []

    for path in sorted(root.rglob("*")):
        if path.is_symlink() or not path.is_file():
            continue
        # newline="" keeps CRLF and lone CR line endings as they are
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError:
            logging.debug(f"Skipping non-text file {path}")
            continue
        except OSError as e:
            msg = f"Could not read {path}: {e}"
            logging.error(msg)
            raise SubstitutionError(msg) from e

        new_text = pattern.sub(to, text)
        if new_text == text:
            continue
        try:
            with open(path, 'w', encoding="utf-8", newline="") as f:
                f.write(new_text)
        except OSError as e:
            msg = f"Could not rewrite {path}: {e}"
            logging.error(msg)
            raise SubstitutionError(msg) from e
        logging.debug(f"Rewrote contents of {path}")
        changed.append(path)

    # Deepest paths first so a directory rename never invalidates its children
    for path in sorted(root.rglob("*"), key=lambda p: len(p.parts), reverse=True):
        if path.is_symlink():
            continue
        new_name = pattern.sub(to, path.name)
        if new_name == path.name:
            continue
        target = path.with_name(new_name)
        if target.exists() and not (replace and path.is_dir() == target.is_dir()):
            msg = f"Cannot rename {path} to {target}: target already exists"
            logging.error(msg)
            raise SubstitutionError(msg)
        try:
            if target.is_dir():
                merge_dir(path, target)
            else:
                path.replace(target)
        except OSError as e:
            msg = f"Could not rename {path}: {e}"
            logging.error(msg)
            raise SubstitutionError(msg) from e
        logging.debug(f"Renamed {path} -> {target.name}")
        changed.append(target)

    return changed


class TemplateStore:
    """The day zero project every new day is copied from."""

    def __init__(self, path: pathlib.Path):
        self.path = path

    def instantiate(self, target: pathlib.Path, overwrite: bool = False) -> None:
        """Copy the template to target."""
        if not self.path.is_dir():
            msg = f"Template directory {self.path} does not exist"
            logging.error(msg)
            raise TemplateCopyError(msg)
        if target.exists() and not overwrite:
            msg = f"{target} already exists, use --force to overwrite it"
            logging.error(msg)
            raise TemplateCopyError(msg)

        logging.info(f"Copying template {self.path} to {target}")
        try:
            shutil.copytree(self.path, target, symlinks=True, dirs_exist_ok=overwrite)
        except (OSError, shutil.Error) as e:
            msg = f"Failed to copy template to {target}: {e}"
            logging.error(msg)
            raise TemplateCopyError(msg) from e


class PuzzleFetcher:
    """Downloads puzzle inputs and pages from the Advent of Code site."""

    def __init__(self, session_id: Optional[str], year: int,
                 base_url: str = BASE_URL, session: Optional[requests.Session] = None):
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url.rstrip("/")
        self.year = year
        if session_id:
            self.session.cookies.update({
                'session': session_id,
            })
            logging.debug(f"Using session cookie {session_id[:8]}...")
        else:
            logging.warning("No session cookie given, requests will not be authenticated")

    def day_url(self, day: int) -> str:
        return f"{self.base_url}/{self.year}/day/{day}"

    def get(self, url: str) -> requests.Response:
        """GET url and fail on anything but a successful response."""
        logging.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            msg = f"Request to {url} failed: {e}"
            logging.error(msg)
            raise FetchError(msg) from e

        logging.debug(f"Response status: {response.status_code}")
        if not response.ok:
            error = HttpError(response.status_code, url)
            logging.error(str(error))
            raise error
        return response

    def fetch_input(self, day: int) -> bytes:
        """Fetch the raw puzzle input for a day."""
        return self.get(f"{self.day_url(day)}/input").content

    def fetch_page(self, day: int) -> str:
        """Fetch the puzzle page HTML for a day."""
        return self.get(self.day_url(day)).text


class DescriptionConverter(MarkdownConverter):
    """Markdown converter that renders <em> the same way as <strong>.

    The puzzle pages use <em> for the important bits, which read better bold
    than italic.
    """

    def __init__(self, **options):
        options.setdefault('heading_style', ATX)
        options.setdefault('bullets', '-')
        super().__init__(**options)

    def convert_em(self, el, text, *args, **kwargs):
        return self.convert_strong(el, text, *args, **kwargs)


def extract_descriptions(html: str) -> List[str]:
    """Return the inner HTML of every .day-desc block, in page order."""
    soup = BeautifulSoup(html, 'html.parser')
    blocks = soup.select('.day-desc')
    logging.debug(f"Found {len(blocks)} description blocks")
    return [block.decode_contents() for block in blocks]


def convert_block(fragment: str, converter: Optional[DescriptionConverter] = None) -> str:
    converter = converter or DescriptionConverter()
    try:
        return converter.convert(fragment).strip()
    except Exception as e:
        raise ConversionError(f"Could not convert description block: {e}") from e


def render_description(html: str) -> str:
    """Convert a puzzle page to the Markdown stored in README.md."""
    converter = DescriptionConverter()
    parts = []
    for i, fragment in enumerate(extract_descriptions(html), 1):
        try:
            parts.append(convert_block(fragment, converter))
        except ConversionError as e:
            logging.warning(f"Description block {i}: {e}, leaving it empty")
            parts.append("")
    if not parts:
        logging.warning("No description blocks found on the puzzle page")
        return ""
    return "\n\n".join(parts) + "\n"


class DayScaffolder:
    """Creates and refreshes the per-day project directories."""

    def __init__(self, fetcher: PuzzleFetcher, template: TemplateStore,
                 challenges_dir: pathlib.Path = pathlib.Path("challenges"),
                 input_name: str = DEFAULT_INPUT_FILE):
        self.fetcher = fetcher
        self.template = template
        self.challenges_dir = challenges_dir
        self.input_name = input_name

    def day_dir(self, day: int) -> pathlib.Path:
        return self.challenges_dir / f"day{pad_day(day)}"

    def write_file(self, path: pathlib.Path, data: bytes) -> None:
        try:
            path.write_bytes(data)
        except OSError as e:
            msg = f"Could not write {path}: {e}"
            logging.error(msg)
            raise FilesystemWriteError(msg) from e
        logging.info(f"Wrote {path} ({len(data)} bytes)")

    def scaffold(self, day: int, overwrite: bool = False) -> pathlib.Path:
        """Create the project for a day and download its input and description."""
        logging.info("=== SETUP ===")
        padded = pad_day(day)
        outdir = self.day_dir(day)

        self.template.instantiate(outdir, overwrite=overwrite)
        changed = rewrite_tree(outdir, TEMPLATE_TOKEN, lambda m: f"{m.group(1)}{padded}",
                               replace=overwrite)
        logging.info(f"Rewrote {len(changed)} template paths for day {padded}")

        logging.info(f"Downloading input for {self.fetcher.year} day {day}")
        data = self.fetcher.fetch_input(day)
        self.write_file(outdir / self.input_name, data)

        self.refresh_description(day)
        return outdir

    def refresh_description(self, day: int) -> pathlib.Path:
        """Download the puzzle description for a day and (re)write its README.md."""
        logging.info("=== UPDATE ===")
        outdir = self.day_dir(day)
        if not outdir.is_dir():
            msg = f"{outdir} does not exist, run setup for day {day} first"
            logging.error(msg)
            raise FilesystemWriteError(msg)

        logging.info(f"Downloading description for {self.fetcher.year} day {day}")
        markdown = render_description(self.fetcher.fetch_page(day))
        readme = outdir / DESCRIPTION_FILE
        self.write_file(readme, markdown.encode("utf-8"))
        return readme


def day_number(value: str) -> int:
    """argparse type for puzzle days."""
    try:
        day = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid day: {value!r}")
    if not 1 <= day <= 25:
        raise argparse.ArgumentTypeError(f"day must be between 1 and 25, got {day}")
    return day


def build_scaffolder(args: argparse.Namespace) -> DayScaffolder:
    challenges_dir = pathlib.Path(args.challenges_dir)
    template_path = getattr(args, 'template', None)
    template = TemplateStore(pathlib.Path(template_path) if template_path else challenges_dir / "day00")
    fetcher = PuzzleFetcher(args.session_id, args.year)
    return DayScaffolder(
        fetcher,
        template,
        challenges_dir=challenges_dir,
        input_name=getattr(args, 'input_name', DEFAULT_INPUT_FILE),
    )


def cmd_setup(args: argparse.Namespace) -> int:
    """Scaffold a day and download its input and description."""
    outdir = build_scaffolder(args).scaffold(args.day, overwrite=args.force)
    logging.info(f"Day {args.day} ready in {outdir}")
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    """Refresh the description of an existing day."""
    readme = build_scaffolder(args).refresh_description(args.day)
    logging.info(f"Updated {readme}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    now = today()
    parser = argparse.ArgumentParser(description="Advent of Code day scaffolder and description fetcher")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--session-id", default=os.environ.get("AOC_SESSION"),
                        help="Advent of Code session cookie (default: $AOC_SESSION)")
    parser.add_argument("--year", type=int, default=os.environ.get("AOC_YEAR", str(now.year)),
                        help="Event year (default: $AOC_YEAR or the current year)")
    parser.add_argument("--day", type=day_number, default=None,
                        help="Puzzle day (default: today's date in the puzzle time zone)")
    parser.add_argument("--challenges-dir", default="challenges",
                        help="Directory holding the day projects")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # setup command
    setup_parser = subparsers.add_parser("setup", help="Create a day from the template and download its input")
    setup_parser.add_argument("--template", help="Template directory (default: <challenges-dir>/day00)")
    setup_parser.add_argument("--input-name", default=DEFAULT_INPUT_FILE, help="File name for the puzzle input")
    setup_parser.add_argument("--force", action="store_true", help="Overwrite an existing day directory")

    # update command
    subparsers.add_parser("update", help="Refresh README.md from the puzzle page (the default)")

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if args.day is None:
        try:
            args.day = day_number(str(now.day))
        except argparse.ArgumentTypeError as e:
            parser.error(f"{e}; pass --day explicitly")

    try:
        if args.command == "setup":
            return cmd_setup(args)
        return cmd_update(args)
    except ScaffoldError as e:
        logging.error(f"Aborted: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
