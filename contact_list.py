import json
import os
import re
import sys
import shutil
import logging
import tempfile
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from typing import Iterator, List, Optional, Tuple
from enum import Enum, auto
from dataclasses import dataclass, field
import argparse
from pathlib import Path


NUMBER_LENGTH = 10
GOODBYE_MESSAGE = "Thank you for using contact list app"


class Mode(Enum):
    """What a single invocation does"""
    NAME_LOOKUP = auto()
    NUMBER_LOOKUP = auto()
    INSERT = auto()
    JSON_IMPORT = auto()


class ErrorKind(Enum):
    """Failure categories reported to the user"""
    INVALID_FILE_NAME = "InvalidFileName"
    INVALID_ARGUMENTS = "InvalidArguments"
    INSUFFICIENT_INPUTS = "InsufficientInputs"
    INVALID_NAME = "InvalidName"
    INVALID_NUMBER = "InvalidNumber"
    MALFORMED_RECORD = "MalformedRecord"
    DUPLICATE_STORED_NUMBER = "DuplicateStoredNumber"
    DUPLICATE_INPUT_NUMBER = "DuplicateInputNumber"
    FILE_NOT_FOUND = "FileNotFound"
    IMPORT_FORMAT_ERROR = "ImportFormatError"


class ContactListError(Exception):
    """Base exception for contact list errors, tagged with an ErrorKind"""
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass
class ContactConfig:
    """Configuration for the contact list"""
    file_marker: str = '.txt'
    import_keyword: str = 'add_json'
    name_width: int = 30
    number_width: int = 20
    log_file: str = 'contact_list.log'
    log_level: str = 'WARNING'
    backup_count: int = 3
    max_file_size: int = 5 * 1024 * 1024  # 5MB


@dataclass
class Contact:
    name: str
    number: str

    @property
    def line(self) -> str:
        return format_record(self.name, self.number)


@dataclass
class ClassifiedArgs:
    path: str
    mode: Mode
    name: Optional[str] = None
    number: Optional[str] = None
    source: Optional[str] = None


# Record codec

def split_record(line: str) -> Tuple[str, str]:
    """Split a stored line into its name and its number as displayed"""
    name, sep, rest = line.partition(':')
    if not sep:
        raise ContactListError(
            ErrorKind.MALFORMED_RECORD,
            f"Record has no ':' separator: {line!r}"
        )
    if rest.startswith(' '):
        rest = rest[1:]
    return name, rest


def parse_record(line: str) -> Tuple[str, str]:
    """
    Parse a stored line into (name, digits)

    Args:
        line: A line such as "Mary Anne: 808-779-1466"

    Returns:
        The name and the number with every non-digit character dropped

    Raises:
        ContactListError: MalformedRecord if the line has no ':'
    """
    name, display_number = split_record(line)
    return name, ''.join(ch for ch in display_number if ch.isdigit())


def format_number(digits: str) -> str:
    if len(digits) != NUMBER_LENGTH:
        raise ContactListError(
            ErrorKind.INVALID_NUMBER,
            "Entered number should be 10 digits.Double check your number.!"
        )
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


def format_record(name: str, digits: str) -> str:
    """Build the stored form "Name: ddd-ddd-dddd" of a record"""
    return f"{name}: {format_number(digits)}"


def render_record(name: str, display_number: str,
                  name_width: int = 30, number_width: int = 20) -> str:
    """Lay out a record as fixed-width console columns"""
    return f"{name:<{name_width}}{display_number:<{number_width}}"


def render_line(line: str, name_width: int = 30, number_width: int = 20) -> str:
    name, display_number = split_record(line)
    return render_record(name, display_number, name_width, number_width)


# Validation

_NAME_PATTERN = re.compile(r'[^a-zA-Z ]')
_NUMBER_PATTERN = re.compile(r'[^0-9]')


def validate_name(name: str) -> None:
    """
    Validate a contact name

    Raises:
        ContactListError: InvalidName if the name is blank or holds anything
            other than ASCII letters and spaces
    """
    if not name.strip():
        raise ContactListError(ErrorKind.INVALID_NAME, "Name cannot be empty")
    if _NAME_PATTERN.search(name):
        raise ContactListError(
            ErrorKind.INVALID_NAME,
            "Entered Name Contains numbers/symbols.Double check the name.!"
        )


def validate_number(number: str) -> None:
    """
    Validate a phone number

    Raises:
        ContactListError: InvalidNumber if the number is not exactly ten digits
    """
    if len(number) != NUMBER_LENGTH:
        raise ContactListError(
            ErrorKind.INVALID_NUMBER,
            "Entered number should be 10 digits.Double check your number.!"
        )
    if _NUMBER_PATTERN.search(number):
        raise ContactListError(
            ErrorKind.INVALID_NUMBER,
            "Entered number Contains letters/symbols.Double check the number.!"
        )


# Argument classification

def capitalize_name(name: str) -> str:
    """Lowercase a name, then upper-case the first letter of each word"""
    chars = list(name.lower())
    in_word = False
    for i, ch in enumerate(chars):
        if ch.isspace():
            in_word = False
        elif not in_word and ch.isalpha():
            chars[i] = ch.upper()
            in_word = True
    return ''.join(chars)


def classify_args(tokens: List[str], config: Optional[ContactConfig] = None) -> ClassifiedArgs:
    """
    Work out the file path and the requested operation from CLI tokens

    The path may contain spaces, so it runs up to and including the first
    token holding the file marker. Everything after it is the payload.

    Args:
        tokens: Raw positional tokens
        config: ContactConfig instance (uses defaults if None)

    Returns:
        ClassifiedArgs describing the invocation

    Raises:
        ContactListError: InvalidFileName, InsufficientInputs, InvalidName
            or InvalidNumber
    """
    config = config or ContactConfig()
    if not tokens:
        raise ContactListError(
            ErrorKind.INSUFFICIENT_INPUTS,
            "You entered nothing.! Use the given input format"
        )

    marker_index = next(
        (i for i, token in enumerate(tokens) if config.file_marker in token),
        None
    )
    if marker_index is None:
        raise ContactListError(
            ErrorKind.INVALID_FILE_NAME,
            "The Entered file name is not a name of a textfile"
        )

    path = ' '.join(tokens[:marker_index + 1])
    payload = tokens[marker_index + 1:]
    if not payload:
        raise ContactListError(
            ErrorKind.INSUFFICIENT_INPUTS,
            "Inputs are not sufficient.!"
        )

    if payload[0] == config.import_keyword:
        if len(payload) < 2:
            raise ContactListError(
                ErrorKind.INSUFFICIENT_INPUTS,
                f"Invalid Input Format: {config.import_keyword} needs a JSON file path"
            )
        return ClassifiedArgs(path=path, mode=Mode.JSON_IMPORT, source=payload[1])

    last = payload[-1]
    if re.fullmatch(r'[0-9]+', last):
        validate_number(last)
        if len(payload) == 1:
            return ClassifiedArgs(path=path, mode=Mode.NUMBER_LOOKUP, number=last)
        name = capitalize_name(' '.join(payload[:-1]))
        validate_name(name)
        return ClassifiedArgs(path=path, mode=Mode.INSERT, name=name, number=last)

    name = capitalize_name(' '.join(payload))
    validate_name(name)
    return ClassifiedArgs(path=path, mode=Mode.NAME_LOOKUP, name=name)


# Store

def _atomic_write(path: Path, text: str) -> None:
    """Write text to *path* via a temp file in the same directory and os.replace"""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(text)
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        with suppress(OSError):
            os.unlink(tmp)
        raise


class ContactStore:
    """Contact records kept as sorted "Name: ddd-ddd-dddd" lines in a text file"""

    def __init__(self, path):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        return self.path.is_file()

    def ensure_exists(self) -> bool:
        """
        Create the backing file, and any missing parent directories

        Returns:
            True if the file had to be created
        """
        if self.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()
        self.logger.info(f"Contact list file not found, created new: {self.path}")
        return True

    def _require_file(self) -> None:
        if not self.exists():
            raise ContactListError(
                ErrorKind.FILE_NOT_FOUND,
                f"{self.path} (The system cannot find the file specified)"
            )

    def read_lines(self) -> List[str]:
        """Return the non-blank stored lines in file order"""
        self._require_file()
        with self.path.open('r', encoding='utf-8') as f:
            return [line.rstrip('\r\n') for line in f if line.strip()]

    def find_by_name(self, name: str) -> Iterator[str]:
        """
        Find the lines that contain a name

        Matching is substring containment over the whole line, so "Anne"
        matches both "Mary Anne" and "Mary Anne David".

        Raises:
            ContactListError: FileNotFound, raised here rather than on iteration
        """
        self._require_file()
        return self._iter_matching(name)

    def _iter_matching(self, name: str) -> Iterator[str]:
        with self.path.open('r', encoding='utf-8') as f:
            for raw in f:
                line = raw.rstrip('\r\n')
                if line.strip() and name in line:
                    yield line

    def find_by_number(self, digits: str) -> Optional[str]:
        """
        Find the single line whose number has the given digits

        Returns:
            The stored line, or None if no record has that number

        Raises:
            ContactListError: FileNotFound, or DuplicateStoredNumber if more
                than one stored record has the number
        """
        match = None
        for line in self.read_lines():
            if parse_record(line)[1] != digits:
                continue
            if match is not None:
                raise ContactListError(
                    ErrorKind.DUPLICATE_STORED_NUMBER,
                    f"Duplicate Numbers Found in the Contact List.! (first match: {match})"
                )
            match = line
        return match

    def insert(self, name: str, digits: str) -> Contact:
        """
        Add a contact and keep the file sorted

        Args:
            name: Contact name
            digits: Ten digit phone number without formatting

        Returns:
            The stored Contact

        Raises:
            ContactListError: InvalidName, InvalidNumber, MalformedRecord or
                DuplicateInputNumber; the file is left unchanged on failure
        """
        validate_name(name)
        validate_number(digits)
        contact = Contact(name, digits)

        self.ensure_exists()
        lines = self.read_lines()
        for line in lines:
            if parse_record(line)[1] == digits:
                raise ContactListError(
                    ErrorKind.DUPLICATE_INPUT_NUMBER,
                    f"The Number is Already Available in the Contact List : {line}"
                )

        lines.append(contact.line)
        lines.sort()
        _atomic_write(self.path, ''.join(f"{line}\n" for line in lines))
        self.logger.info(f"Added contact: {contact.line}")
        return contact


# Bulk import

@dataclass
class ImportOutcome:
    index: int
    name: object
    number: object
    contact: Optional[Contact] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ImportReport:
    source: str
    outcomes: List[ImportOutcome] = field(default_factory=list)

    @property
    def inserted(self) -> List[Contact]:
        return [o.contact for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[ImportOutcome]:
        return [o for o in self.outcomes if not o.ok]


def load_import_file(source) -> List:
    """
    Read the records of a JSON import file

    Raises:
        ContactListError: ImportFormatError if the file cannot be read or is
            not a JSON array
    """
    try:
        with Path(source).open('r', encoding='utf-8') as f:
            records = json.load(f)
    except (OSError, ValueError) as e:
        raise ContactListError(
            ErrorKind.IMPORT_FORMAT_ERROR,
            f"Input Invalid. Please input Json file path as <C:\\example.json> ({e})"
        ) from e
    if not isinstance(records, list):
        raise ContactListError(
            ErrorKind.IMPORT_FORMAT_ERROR,
            "Imported data must be a list of contacts"
        )
    return records


def _import_one(store: ContactStore, record) -> Contact:
    if not isinstance(record, dict) or 'name' not in record or 'number' not in record:
        raise ContactListError(
            ErrorKind.IMPORT_FORMAT_ERROR,
            "Each contact must have a name and a number"
        )
    if not isinstance(record['name'], str):
        raise ContactListError(ErrorKind.INVALID_NAME, "Contact name must be text")
    name = capitalize_name(record['name'].strip())
    digits = ''.join(ch for ch in str(record['number']) if ch.isdigit())
    return store.insert(name, digits)


def import_records(store: ContactStore, records: List, source: str = '') -> ImportReport:
    """
    Insert each record into the store, carrying on past failed records

    Args:
        store: Target ContactStore
        records: Parsed import records, each with 'name' and 'number'
        source: Where the records came from, for reporting

    Returns:
        ImportReport with one outcome per record, in input order
    """
    logger = logging.getLogger(__name__)
    report = ImportReport(source=source)
    for index, record in enumerate(records, start=1):
        name = record.get('name') if isinstance(record, dict) else None
        number = record.get('number') if isinstance(record, dict) else None
        outcome = ImportOutcome(index=index, name=name, number=number)
        try:
            outcome.contact = _import_one(store, record)
        except (ContactListError, OSError) as e:
            logger.info(f"Skipped import record {index}: {e}")
            outcome.error = e
        report.outcomes.append(outcome)

    logger.info(
        f"Imported {len(report.inserted)} of {len(report.outcomes)} contacts from {source}"
    )
    return report


def import_from(store: ContactStore, source) -> ImportReport:
    return import_records(store, load_import_file(source), str(source))


# CLI

class ContactCLI:
    """Command-line interface for the contact list"""

    def __init__(self, config: Optional[ContactConfig] = None):
        self.config = config or ContactConfig()
        self.logger = logging.getLogger(__name__)

    def run(self, tokens: List[str]) -> None:
        """Classify the tokens and run the one requested operation"""
        args = classify_args(tokens, self.config)
        store = ContactStore(args.path)
        self.logger.debug(f"Running {args.mode.name} against {store.path}")

        if args.mode is Mode.NAME_LOOKUP:
            self._lookup_name(store, args.name)
        elif args.mode is Mode.NUMBER_LOOKUP:
            self._lookup_number(store, args.number)
        elif args.mode is Mode.INSERT:
            if store.ensure_exists():
                print("File doesnt exist. Created new file")
            store.insert(args.name, args.number)
            print("Successfully added the contact details to the Contact List.!")
        elif args.mode is Mode.JSON_IMPORT:
            self._import(store, args.source)

    def _lookup_name(self, store: ContactStore, name: str) -> None:
        found = False
        for line in store.find_by_name(name):
            print(render_line(line, self.config.name_width, self.config.number_width))
            found = True
        if not found:
            print("ERROR : No such Contact found.!")

    def _lookup_number(self, store: ContactStore, number: str) -> None:
        line = store.find_by_number(number)
        print(line if line is not None else "No such Number found.!")

    def _import(self, store: ContactStore, source: str) -> None:
        records = load_import_file(source)
        if store.ensure_exists():
            print("File doesnt exist. Created new file")
        report = import_records(store, records, source)
        for outcome in report.outcomes:
            if outcome.ok:
                print(f"Added: {outcome.contact.line}")
            else:
                label = outcome.name if isinstance(outcome.name, str) else None
                label = (label or "").strip() or "unnamed"
                print(f"Record {outcome.index} ({label}): {outcome.error}")
        print(f"Imported {len(report.inserted)} of {len(report.outcomes)} contacts from {source}")


class ContactArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors as ContactListError instead of exiting"""

    def error(self, message):
        raise ContactListError(ErrorKind.INVALID_ARGUMENTS, message)


def build_parser() -> argparse.ArgumentParser:
    parser = ContactArgumentParser(
        prog='contact-list',
        description='Phone contact list stored in a sorted text file',
        epilog=(
            'Examples: contact-list contacts.txt Mary Anne | '
            'contact-list contacts.txt 8087791466 | '
            'contact-list contacts.txt Mary Anne 8087791466 | '
            'contact-list contacts.txt add_json contacts.json'
        )
    )
    parser.add_argument('tokens', nargs=argparse.REMAINDER,
                        help='Path to the .txt file followed by a name, a number, '
                             'a name and a number, or add_json <file>; '
                             'options must come before the path')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=None, help='Logging level')
    parser.add_argument('--log-file', default=None, help='Path to the log file')
    return parser


def setup_logging(config: ContactConfig) -> None:
    """Configure logging system"""
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            RotatingFileHandler(
                config.log_file,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                delay=True
            ),
            logging.StreamHandler()
        ]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; always reports and exits normally"""
    logger = logging.getLogger(__name__)
    config = ContactConfig()

    try:
        # Options are only read before the path; everything after it is a token
        args = build_parser().parse_args(argv)
        if args.log_level:
            config.log_level = args.log_level
        if args.log_file:
            config.log_file = args.log_file
        setup_logging(config)

        ContactCLI(config).run(args.tokens)
    except ContactListError as e:
        logger.debug(f"Operation failed: {e}")
        print(str(e))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        print(f"Unexpected error: {str(e)}")
    finally:
        print(GOODBYE_MESSAGE)
    return 0


if __name__ == "__main__":
    sys.exit(main())
