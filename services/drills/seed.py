"""Seed the drills table with sample interview drills.

Usage:
    python -m services.drills.seed            # insert drills whose titles are missing
    python -m services.drills.seed --reset    # wipe drills first, then insert all
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Dict, List

from packages.common.config import get_settings
from packages.common.logging import configure_logging
from . import repo
from .validation import validate_drill

log = logging.getLogger("drills.seed")

SAMPLE_DRILLS: List[Dict[str, Any]] = [
    {
        "title": "JavaScript Fundamentals",
        "difficulty": "easy",
        "tags": ["javascript", "basics", "programming"],
        "questions": [
            {"id": "q1", "prompt": "What is the difference between let, const, and var in JavaScript?",
             "keywords": ["scope", "hoisting", "reassignment", "declaration", "block"]},
            {"id": "q2", "prompt": "Explain what a closure is in JavaScript.",
             "keywords": ["function", "scope", "lexical", "enclosure", "variable"]},
            {"id": "q3", "prompt": "What is the purpose of the 'this' keyword in JavaScript?",
             "keywords": ["context", "object", "function", "method", "binding"]},
            {"id": "q4", "prompt": "Describe the event loop in JavaScript.",
             "keywords": ["asynchronous", "callback", "queue", "stack", "non-blocking"]},
            {"id": "q5", "prompt": "What are promises and how do they work?",
             "keywords": ["asynchronous", "resolve", "reject", "then", "catch", "async", "await"]},
        ],
    },
    {
        "title": "Node.js and Express",
        "difficulty": "medium",
        "tags": ["nodejs", "express", "backend"],
        "questions": [
            {"id": "q1", "prompt": "What is Node.js and what are its main features?",
             "keywords": ["runtime", "javascript", "server", "asynchronous", "event", "non-blocking"]},
            {"id": "q2", "prompt": "Explain the Event-Driven Architecture in Node.js.",
             "keywords": ["event", "loop", "emitter", "listener", "callback", "asynchronous"]},
            {"id": "q3", "prompt": "What is Express.js and why is it used?",
             "keywords": ["framework", "middleware", "routing", "web", "application", "server"]},
            {"id": "q4", "prompt": "Describe middleware in Express.js.",
             "keywords": ["middleware", "request", "response", "next", "chain", "function"]},
            {"id": "q5", "prompt": "What is the difference between app.use() and app.get() in Express?",
             "keywords": ["use", "get", "middleware", "route", "http", "method"]},
        ],
    },
    {
        "title": "Database Design and SQL",
        "difficulty": "hard",
        "tags": ["database", "sql", "design"],
        "questions": [
            {"id": "q1", "prompt": "Explain the differences between SQL and NoSQL databases.",
             "keywords": ["relational", "document", "schema", "scalability", "acid", "base"]},
            {"id": "q2", "prompt": "What are database normalization and its forms?",
             "keywords": ["normalization", "1nf", "2nf", "3nf", "redundancy", "anomaly"]},
            {"id": "q3", "prompt": "Describe the different types of SQL joins.",
             "keywords": ["join", "inner", "left", "right", "full", "outer", "cross"]},
            {"id": "q4", "prompt": "What are database indexes and how do they work?",
             "keywords": ["index", "performance", "query", "b-tree", "lookup", "optimization"]},
            {"id": "q5", "prompt": "Explain ACID properties in database transactions.",
             "keywords": ["atomicity", "consistency", "isolation", "durability", "transaction", "rollback"]},
        ],
    },
    {
        "title": "System Design Fundamentals",
        "difficulty": "hard",
        "tags": ["architecture", "scalability", "design"],
        "questions": [
            {"id": "q1", "prompt": "What is the difference between horizontal and vertical scaling?",
             "keywords": ["scaling", "horizontal", "vertical", "load", "performance", "capacity"]},
            {"id": "q2", "prompt": "Explain the concept of load balancing.",
             "keywords": ["load", "balancer", "distribution", "traffic", "server", "algorithm"]},
            {"id": "q3", "prompt": "What is caching and why is it important?",
             "keywords": ["cache", "memory", "performance", "latency", "hit", "miss"]},
            {"id": "q4", "prompt": "Describe the concept of microservices architecture.",
             "keywords": ["microservices", "monolithic", "service", "independent", "deployment", "communication"]},
            {"id": "q5", "prompt": "What is a Content Delivery Network (CDN)?",
             "keywords": ["cdn", "content", "delivery", "edge", "cache", "global", "latency"]},
        ],
    },
]


async def seed(drills: List[Dict[str, Any]] = SAMPLE_DRILLS, reset: bool = False) -> int:
    """Create the schema and insert `drills`; returns how many were inserted.

    Without `reset`, drills whose title already exists are skipped. Every drill
    is validated first; the first invalid one aborts the run with ValueError
    before anything is written.
    """
    payloads = []
    for raw in drills:
        result = validate_drill(raw)
        if not result.ok:
            raise ValueError(f"invalid sample drill {raw.get('title')!r}: {result.issues}")
        payloads.append(result.value)

    await repo.init_db()
    inserted = 0
    async with repo.get_sessionmaker()() as session:
        if reset:
            removed = await repo.delete_drills(session)
            log.info("Cleared existing drills", extra={"fields": {"removed": removed}})
        for p in payloads:
            if not reset and await repo.get_drill_by_title(session, p.title) is not None:
                log.info("Skipping existing drill", extra={"fields": {"title": p.title}})
                continue
            await repo.create_drill(session, p)
            inserted += 1
    log.info("Seed complete", extra={"fields": {"inserted": inserted}})
    return inserted


def main() -> None:
    """Entry point for the drill seeder."""
    s = get_settings()
    configure_logging(s.LOG_LEVEL, service=s.SERVICE_NAME)

    ap = argparse.ArgumentParser(prog="services.drills.seed", description="Seed sample interview drills")
    ap.add_argument("--reset", action="store_true", help="Delete all drills before inserting")
    args = ap.parse_args()

    async def _run() -> None:
        try:
            await seed(reset=args.reset)
        finally:
            await repo.get_engine().dispose()

    asyncio.run(_run())


if __name__ == "__main__":  # pragma: no cover
    main()
