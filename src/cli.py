"""Click CLI for credibility scores, compatibility, teammate ranking and seeding."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import click
from pydantic import BaseModel, ValidationError

from src.credibility.cache import SQLiteCredibilityCache
from src.credibility.service import CredibilityService, ProfileNotFoundError
from src.github.provider import GitHubMetadataProvider
from src.matching.compatibility import calculate_compatibility
from src.matching.models import MatchCandidate, MatchingEngineInput, MatchTarget, MatchUser
from src.matching.teammate_engine import extract_keywords, rank_candidates
from src.store.models import (
    ActivityEntry,
    Endorsement,
    Invite,
    Membership,
    Profile,
    Project,
    SkillVerification,
)
from src.store.records import SQLiteRecordStore
from src.suggestions.service import ProjectNotFoundError, TeammateSuggestionService

# Section name -> (row model, store insert method), in insertion order
SEED_SECTIONS: dict[str, tuple[type[BaseModel], str]] = {
    "profiles": (Profile, "add_profile"),
    "projects": (Project, "add_project"),
    "memberships": (Membership, "add_membership"),
    "endorsements": (Endorsement, "add_endorsement"),
    "invites": (Invite, "add_invite"),
    "verifications": (SkillVerification, "add_verification"),
    "activity": (ActivityEntry, "add_activity"),
}


@click.group()
@click.option(
    "--db", default="data/records.db", envvar="RECORDS_DB_PATH", help="Records database path.",
)
@click.option(
    "--cache-db",
    default="data/credibility-cache.db",
    envvar="CREDIBILITY_CACHE_DB_PATH",
    help="Credibility cache database path.",
)
@click.option("--offline", is_flag=True, help="Skip repository metadata lookups.")
@click.option("-v", "--verbose", is_flag=True, help="Log warnings to stderr.")
@click.pass_context
def cli(ctx: click.Context, db: str, cache_db: str, offline: bool, verbose: bool) -> None:
    """Teammate credibility and ranking CLI."""
    ctx.ensure_object(dict)
    logging.basicConfig(level=logging.INFO if verbose else logging.ERROR)
    ctx.obj["db"] = db
    ctx.obj["cache_db"] = cache_db
    ctx.obj["offline"] = offline


def _services(ctx: click.Context) -> tuple[CredibilityService, TeammateSuggestionService]:
    store = SQLiteRecordStore(ctx.obj["db"])
    cache = SQLiteCredibilityCache.from_env(ctx.obj["cache_db"])
    provider = None if ctx.obj["offline"] else GitHubMetadataProvider.from_env()
    credibility = CredibilityService(store, cache, provider)
    return credibility, TeammateSuggestionService(store, credibility, provider)


def _load_json(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise click.ClickException(f"{path} must contain a JSON object")
    return data


@cli.command()
@click.argument("user_id")
@click.option("--summary", is_flag=True, help="Print the cached summary only.")
@click.pass_context
def credibility(ctx: click.Context, user_id: str, summary: bool) -> None:
    """Compute the credibility breakdown for a user."""
    service, _ = _services(ctx)
    try:
        if summary:
            result = asyncio.run(service.get_user_credibility_summary(user_id))
        else:
            result = asyncio.run(service.get_user_credibility(user_id))
    except ProfileNotFoundError as e:
        raise click.ClickException(str(e)) from e
    click.echo(result.model_dump_json(indent=2))


@cli.command()
@click.argument("project_id")
@click.pass_context
def suggest(ctx: click.Context, project_id: str) -> None:
    """Rank suggested teammates for a project."""
    _, service = _services(ctx)
    try:
        results = asyncio.run(service.get_suggested_teammates(project_id))
    except ProjectNotFoundError as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def compatibility(file: str) -> None:
    """Score a user against a target from a JSON file with "user" and "target"."""
    data = _load_json(file)
    try:
        user = MatchUser.model_validate(data.get("user"))
        target = MatchTarget.model_validate(data.get("target"))
    except ValidationError as e:
        raise click.ClickException(f"Invalid input: {e}") from e
    click.echo(calculate_compatibility(user, target).model_dump_json(indent=2))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", default=20, show_default=True, help="Maximum results to print.")
def rank(file: str, limit: int) -> None:
    """Rank candidates from a JSON file with "target" and "candidates".

    Keywords are extracted from the target's description when omitted.
    """
    data = _load_json(file)
    target = dict(data.get("target") or {})
    if "keywords" not in target:
        target["keywords"] = extract_keywords(target.get("description", ""))
    try:
        engine_input = MatchingEngineInput.model_validate(target)
        candidates = [MatchCandidate.model_validate(c) for c in data.get("candidates") or []]
    except ValidationError as e:
        raise click.ClickException(f"Invalid input: {e}") from e
    results = rank_candidates(candidates, engine_input)[:limit]
    click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def seed(ctx: click.Context, file: str) -> None:
    """Load records into the records database from a JSON file.

    The file maps section names (profiles, projects, memberships,
    endorsements, invites, verifications, activity) to lists of rows.
    Every row is validated before anything is written.
    """
    data = _load_json(file)
    unknown = sorted(set(data) - set(SEED_SECTIONS))
    if unknown:
        raise click.ClickException(f"Unknown sections: {', '.join(unknown)}")

    parsed: dict[str, list[BaseModel]] = {}
    for section, (model, _) in SEED_SECTIONS.items():
        rows = data.get(section) or []
        if not isinstance(rows, list):
            raise click.ClickException(f"Section '{section}' must be a list")
        try:
            parsed[section] = [model.model_validate(row) for row in rows]
        except ValidationError as e:
            raise click.ClickException(f"Invalid {section}: {e}") from e

    with SQLiteRecordStore(ctx.obj["db"]) as store:
        for section, (_, method) in SEED_SECTIONS.items():
            add = getattr(store, method)
            for record in parsed[section]:
                add(record)
    click.echo(json.dumps({section: len(records) for section, records in parsed.items()}))


if __name__ == "__main__":
    cli()
