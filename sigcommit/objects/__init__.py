"""Git object model and canonical encoding."""

from sigcommit.objects.commit import (
    EMPTY_TREE_ID,
    SIGNATURE_HEADER,
    Commit,
    Identity,
    commit_id,
    decode_commit,
    encode_commit,
    fold_header_value,
    object_id,
    unfold_header_value,
)

__all__ = [
    "EMPTY_TREE_ID",
    "SIGNATURE_HEADER",
    "Commit",
    "Identity",
    "commit_id",
    "decode_commit",
    "encode_commit",
    "fold_header_value",
    "object_id",
    "unfold_header_value",
]
