"""
Job search filters.

find() turns independently-optional search fields into a single conjunctive
filter; find_zombies() builds the filter a reaper uses to spot jobs that still
claim to be active but have stopped updating. Both are pure: they return a
fresh filter tree and never touch the database.
"""

from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional, Union

from .database import JobStatus
from .filters import Attribute, Equals, Filter, LessThan, Like, all_of, any_of
from .tags import get_tag_like_string

ZOMBIE_STATUSES = (JobStatus.RUNNING, JobStatus.INIT)


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _as_status(status: Union[JobStatus, str]) -> JobStatus:
    if isinstance(status, JobStatus):
        return status
    return JobStatus(status)


def find(
    id: Optional[str] = None,
    name: Optional[str] = None,
    user: Optional[str] = None,
    statuses: Optional[Iterable[Union[JobStatus, str]]] = None,
    tags: Optional[Iterable[str]] = None,
    cluster_name: Optional[str] = None,
    cluster_id: Optional[str] = None,
    command_name: Optional[str] = None,
    command_id: Optional[str] = None,
) -> Filter:
    """
    Build the filter for a job search.

    Every argument is optional. None, "" and whitespace-only strings add no
    constraint; None and empty collections add no constraint. id and name are
    LIKE-matched as given, the other scalar fields must be equal. statuses
    becomes one OR term, tags one LIKE term against the encoded tag column.
    With nothing present the result matches every job.
    """
    terms: List[Filter] = []
    if _is_non_empty_str(id):
        terms.append(Like(Attribute.ID, id))
    if _is_non_empty_str(name):
        terms.append(Like(Attribute.NAME, name))
    if _is_non_empty_str(user):
        terms.append(Equals(Attribute.USER, user))
    # Materialize first so an empty iterator counts as absent
    statuses = {_as_status(s) for s in statuses or ()}
    tags = set(tags or ())

    if statuses:
        wanted = sorted(statuses, key=lambda s: s.name)
        terms.append(any_of(Equals(Attribute.STATUS, s) for s in wanted))
    if tags:
        # A set holding only "" is still a tag filter
        terms.append(Like(Attribute.TAGS, get_tag_like_string(tags)))
    if _is_non_empty_str(cluster_name):
        terms.append(Equals(Attribute.CLUSTER_NAME, cluster_name))
    if _is_non_empty_str(cluster_id):
        terms.append(Equals(Attribute.CLUSTER_ID, cluster_id))
    if _is_non_empty_str(command_name):
        terms.append(Equals(Attribute.COMMAND_NAME, command_name))
    if _is_non_empty_str(command_id):
        terms.append(Equals(Attribute.COMMAND_ID, command_id))

    return all_of(terms)


def find_zombies(now: datetime, cutoff: datetime) -> Filter:
    """
    Filter for jobs that are RUNNING or INIT and were last updated before
    ``cutoff``. A cutoff after ``now`` is allowed and simply matches more jobs.
    """
    age = now - cutoff
    resolved = now - age
    terms = [
        LessThan(Attribute.UPDATED, resolved),
        any_of(Equals(Attribute.STATUS, s) for s in ZOMBIE_STATUSES),
    ]
    return all_of(terms)


def zombie_cutoff(now: datetime, max_age: Union[timedelta, int]) -> datetime:
    """Cutoff instant for ``find_zombies``; an int max_age is milliseconds."""
    if not isinstance(max_age, timedelta):
        max_age = timedelta(milliseconds=max_age)
    return now - max_age
