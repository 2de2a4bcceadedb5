"""
learnlens - concurrent learner analytics.

A request of learner responses is fanned out to a roster of independent
specialists (engagement, completion, rating, mastery, market), each bounded
by a deadline and retried on transient failures. Their outputs are merged
into one fixed-shape report; a failed specialist degrades its own fields
to 0 instead of failing the report.

Packages:
    core            errors, logging, settings, report store
    execution       deadline guard, retry policy, attempt outcomes
    observability   execution recorder, Prometheus-style metrics
    orchestration   orchestrator, merge, session context
    specialists     specialist contract, built-in and remote specialists
    ingest          request schemas, CSV reader
    api / cli       FastAPI surface and typer CLI
"""

__version__ = "0.1.0"
