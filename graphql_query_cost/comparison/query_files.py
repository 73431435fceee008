# Copyright 2026-present Kensho Technologies, LLC.
"""Loading of .graphql query files, and of plausible variable values for them."""
from dataclasses import dataclass
import glob
import logging
import os
import random
import re
from typing import Any, Dict, List, Optional

from funcy import lremove

from ..ast_manipulation import is_fragment_only_document, safe_parse_graphql
from ..exceptions import GraphQLParsingError


logger = logging.getLogger(__name__)

QUERY_FILE_EXTENSION = ".graphql"

# Matches the "$name: Type" variable definitions of an operation.
VARIABLE_DEFINITION_PATTERN = re.compile(r"\$(\w+):\s*\w+")

DEFAULT_PAGE_SIZE_VARIABLE_VALUE = 10
DUMMY_GLOBAL_ID = "gid://shopify/Product/1"

# Variables that are optional in practice, and are left unset.
_OPTIONAL_VARIABLE_NAMES = frozenset({"after", "before", "query"})
_PAGE_SIZE_VARIABLE_NAMES = frozenset({"first", "last"})
_ID_VARIABLE_PATTERN = re.compile("id", flags=re.IGNORECASE)


@dataclass(frozen=True)
class QueryFile:
    """A GraphQL document read from disk."""

    path: str
    name: str  # The file name, without directory or extension.
    content: str


def read_query_file(path: str) -> QueryFile:
    """Read the query file at the given path."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    name, _ = os.path.splitext(os.path.basename(path))
    return QueryFile(path=path, name=name, content=content)


def extract_variable_names(query_string: str) -> List[str]:
    """Return the names of the variables the query defines, without "$", in order of appearance."""
    variable_names: List[str] = []
    for variable_name in VARIABLE_DEFINITION_PATTERN.findall(query_string):
        if variable_name not in variable_names:
            variable_names.append(variable_name)
    return variable_names


def requires_variables(query_string: str) -> bool:
    """Return True if the query defines any variables."""
    return bool(extract_variable_names(query_string))


def is_fragment_only(query_string: str) -> bool:
    """Return True if the document only defines fragments, and so cannot be executed alone."""
    try:
        return is_fragment_only_document(safe_parse_graphql(query_string))
    except GraphQLParsingError as e:
        # Unparseable files are kept, so their failure shows up when they are estimated.
        logger.debug("Could not parse query file contents, keeping it as executable: %s", e)
        return False


def default_variables(query_string: str) -> Dict[str, Any]:
    """Return values for the query's variables suitable for a cost comparison run.

    Page sizes are set to a moderate value, ID-like variables are set to a dummy global ID, and
    everything else is left unset.
    """
    variables: Dict[str, Any] = {}
    for variable_name in extract_variable_names(query_string):
        if variable_name in _PAGE_SIZE_VARIABLE_NAMES:
            variables[variable_name] = DEFAULT_PAGE_SIZE_VARIABLE_VALUE
        elif variable_name in _OPTIONAL_VARIABLE_NAMES:
            continue
        elif _ID_VARIABLE_PATTERN.search(variable_name):
            variables[variable_name] = DUMMY_GLOBAL_ID
    return variables


def load_query_files(directory: str, include_fragments: bool = True) -> List[QueryFile]:
    """Load every query file in the directory, sorted by path."""
    paths = sorted(glob.glob(os.path.join(directory, "*" + QUERY_FILE_EXTENSION)))
    query_files = [read_query_file(path) for path in paths]
    if include_fragments:
        return query_files
    return lremove(lambda query_file: is_fragment_only(query_file.content), query_files)


def load_random_query_files(
    directory: str, count: int, include_fragments: bool = False, seed: Optional[int] = None
) -> List[QueryFile]:
    """Load a random sample of at most count query files from the directory."""
    query_files = load_query_files(directory, include_fragments=include_fragments)
    sample_size = min(count, len(query_files))
    return random.Random(seed).sample(query_files, sample_size)
