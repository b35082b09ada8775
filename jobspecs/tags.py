from typing import Iterable

TAG_DELIMITER = "|"
WILDCARD = "%"


def encode_tags(tags: Iterable[str]) -> str:
    """
    Canonical persisted form of a tag set: sorted, delimiter joined.
    The empty string is kept as a member like any other tag.
    """
    return TAG_DELIMITER.join(sorted(set(tags)))


def get_tag_like_string(tags: Iterable[str]) -> str:
    """
    LIKE pattern matching the encoded tag set as a contiguous run inside a
    job's persisted tag string. Same set in any order gives the same string.
    """
    return f"{WILDCARD}{encode_tags(tags)}{WILDCARD}"
