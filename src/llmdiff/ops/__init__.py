from llmdiff.ops.executor import BatchResult, Executor, execute_all
from llmdiff.ops.model import (
    Create,
    Delete,
    Operation,
    Overwrite,
    Rename,
    SearchReplace,
    operation_from_dict,
)
from llmdiff.ops.parser import extract_payload, parse

__all__ = [
    "BatchResult",
    "Create",
    "Delete",
    "Executor",
    "Operation",
    "Overwrite",
    "Rename",
    "SearchReplace",
    "execute_all",
    "extract_payload",
    "operation_from_dict",
    "parse",
]
