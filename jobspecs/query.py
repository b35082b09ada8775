"""
SQLAlchemy adapter for job filters.

Lowers a filter tree into a boolean clause over the ``jobs`` table and runs
it. Ordering, paging and transactions are left to the caller's session.
"""

from typing import Dict, List

from sqlalchemy import and_, false, or_, true
from sqlalchemy.orm import Session

from .database import Job
from .filters import And, Attribute, Equals, Filter, LessThan, Like, Or, TrueFilter, walk
from .logger import get_logger

COLUMNS: Dict[Attribute, object] = {
    Attribute.ID: Job.id,
    Attribute.NAME: Job.name,
    Attribute.USER: Job.user,
    Attribute.STATUS: Job.status,
    Attribute.CLUSTER_NAME: Job.cluster_name,
    Attribute.CLUSTER_ID: Job.cluster_id,
    Attribute.COMMAND_NAME: Job.command_name,
    Attribute.COMMAND_ID: Job.command_id,
    Attribute.TAGS: Job.tags,
    Attribute.UPDATED: Job.updated,
}


def to_clause(expr: Filter):
    """Translate ``expr`` into a SQLAlchemy clause element."""
    if isinstance(expr, TrueFilter):
        return true()
    if isinstance(expr, Equals):
        return COLUMNS[expr.attribute] == expr.value
    if isinstance(expr, LessThan):
        return COLUMNS[expr.attribute] < expr.value
    if isinstance(expr, Like):
        return COLUMNS[expr.attribute].like(expr.pattern)
    if isinstance(expr, And):
        if not expr.terms:
            return true()
        return and_(*(to_clause(t) for t in expr.terms))
    if isinstance(expr, Or):
        if not expr.terms:
            return false()
        return or_(*(to_clause(t) for t in expr.terms))
    raise TypeError(f"Unsupported filter node: {type(expr).__name__}")


def search_jobs(session: Session, expr: Filter) -> List[Job]:
    """Return every job matching ``expr``."""
    predicates = sum(1 for node in walk(expr) if isinstance(node, (Equals, LessThan, Like)))
    jobs = session.query(Job).filter(to_clause(expr)).all()

    logger = get_logger()
    logger.record_search(predicates)
    logger.debug("Job search executed", predicates=predicates, matched=len(jobs))
    return jobs
