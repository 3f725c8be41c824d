"""
Deploy, roll back or preview suggestion patches from the CLI.

Usage:
    python scripts/run_edge_config.py deploy payload.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from db.session import get_session_factory
from edge_config.config import get_edge_config_settings
from edge_config.logging_utils import configure_logging
from edge_config.orchestrator import EdgeConfigOrchestrator
from edge_config.payload import OperationPayload
from edge_config.storage.sqlalchemy_storage import SQLAlchemyObjectStorage


async def run(operation: str, payload: OperationPayload) -> dict:
    settings = get_edge_config_settings()
    session_factory = get_session_factory()
    orchestrator = EdgeConfigOrchestrator.from_settings(
        settings,
        storage=SQLAlchemyObjectStorage(bucket=settings.deploy_bucket, session_factory=session_factory),
        preview_storage=SQLAlchemyObjectStorage(bucket=settings.preview_bucket, session_factory=session_factory),
    )

    site = payload.site.to_record()
    opportunity = payload.opportunity.to_record()
    suggestions = payload.suggestion_records()

    if operation == "deploy":
        result = await orchestrator.deploy_suggestions(site, opportunity, suggestions)
    elif operation == "rollback":
        result = await orchestrator.rollback_suggestions(site, opportunity, suggestions)
    else:
        options = payload.options.merged_with(settings.preview) if payload.options else None
        result = await orchestrator.preview_suggestions(site, opportunity, suggestions, options)
    return result.to_dict()


def main() -> int:
    parser = argparse.ArgumentParser(description="Run an edge configuration operation.")
    parser.add_argument("operation", choices=("deploy", "rollback", "preview"))
    parser.add_argument("payload", type=Path, help="JSON file with site, opportunity and suggestions.")
    args = parser.parse_args()

    configure_logging()
    payload = OperationPayload.model_validate_json(args.payload.read_text(encoding="utf-8"))
    print(json.dumps(asyncio.run(run(args.operation, payload)), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
