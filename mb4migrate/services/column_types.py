"""
Column type descriptor parser

Classifies a declared SQL type string (information_schema COLUMN_TYPE) into
one of three families:

- TextFamily: TINYTEXT, TEXT, MEDIUMTEXT, LONGTEXT (base name ends in "text")
- Varchar: VARCHAR(n) with a positive integer length, also spelled
  NATIONAL VARCHAR, NVARCHAR, CHARACTER VARYING and the like
- Other: any other well-formed type (INT(11), ENUM(...), BLOB, DATETIME...)

Only the first two carry a character set and need converting. Strings that
are not shaped like a SQL type at all raise MalformedTypeDescriptor.
"""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from mb4migrate.core.exceptions import MalformedTypeDescriptor

# name [word...] [(args)] [modifier...]
# e.g. "varchar(255)", "int(11) unsigned zerofill", "double precision", "enum('a','b')"
TYPE_DESCRIPTOR_RE = re.compile(
    r"^(?P<name>[a-z][a-z0-9_]*)"
    r"(?:\s+[a-z][a-z0-9_]*)*"
    r"\s*(?:\((?P<args>.*)\))?"
    r"(?:\s+[a-z][a-z0-9_]*)*$",
    re.IGNORECASE,
)

VARCHAR_LENGTH_RE = re.compile(r"^\s*(?P<length>[0-9]+)\s*$")

# Spellings MySQL accepts for VARCHAR, compared with whitespace collapsed
VARCHAR_SYNONYMS = frozenset(
    {
        "VARCHAR",
        "VARCHARACTER",
        "NVARCHAR",
        "NATIONAL VARCHAR",
        "NCHAR VARCHAR",
        "CHAR VARYING",
        "CHARACTER VARYING",
        "NCHAR VARYING",
        "NATIONAL CHAR VARYING",
        "NATIONAL CHARACTER VARYING",
    }
)


class TextFamily(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    subtype: str  # TINYTEXT, TEXT, MEDIUMTEXT, LONGTEXT


class Varchar(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["varchar"] = "varchar"
    length: int = Field(gt=0)


class Other(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["other"] = "other"
    name: str


def _type_words(descriptor: str) -> str:
    """The words before the argument list, upper-cased and single-spaced"""
    return " ".join(descriptor.partition("(")[0].split()).upper()


def parse_column_type(type_string: str) -> TextFamily | Varchar | Other:
    """
    Parse a declared column type into its family.

    Args:
        type_string: Declared SQL type, any case

    Returns:
        TextFamily, Varchar or Other

    Raises:
        MalformedTypeDescriptor: If the string is empty or not a SQL type
    """
    if type_string is None:
        raise MalformedTypeDescriptor("")

    descriptor = type_string.strip()
    match = TYPE_DESCRIPTOR_RE.match(descriptor)
    if not match:
        raise MalformedTypeDescriptor(type_string)

    name = match.group("name").upper()
    args = match.group("args")

    if name.endswith("TEXT"):
        return TextFamily(subtype=name)

    if name == "VARCHAR" or _type_words(descriptor) in VARCHAR_SYNONYMS:
        length_match = VARCHAR_LENGTH_RE.match(args or "")
        if not length_match or int(length_match.group("length")) == 0:
            raise MalformedTypeDescriptor(type_string)
        return Varchar(length=int(length_match.group("length")))

    return Other(name=name)


def canonical_type(type_string: str) -> str:
    """
    Declared type with VARCHAR synonyms spelled as plain VARCHAR.

    NATIONAL VARCHAR(10) implies the utf8 character set and can't be combined
    with an explicit CHARACTER SET, so it is rewritten to VARCHAR(10).
    Every other type comes back stripped but otherwise unchanged.
    """
    descriptor = type_string.strip()
    words = _type_words(descriptor)
    if words != "VARCHAR" and words in VARCHAR_SYNONYMS:
        _, paren, rest = descriptor.partition("(")
        return f"VARCHAR{paren}{rest}"
    return descriptor


def needs_conversion(column_type: TextFamily | Varchar | Other) -> bool:
    """True for the string-bearing families that carry a character set"""
    return not isinstance(column_type, Other)
