"""Command line interface for article bot."""

import asyncio
import logging
import sys
from datetime import date

import click

# Heavy dependencies (aiohttp, Pillow, FastAPI) are imported inside the
# commands so the CLI module stays importable for help and registration tests.

logger = logging.getLogger(__name__)


def _split_csv(value: str):
    return [item.strip() for item in (value or "").split(",") if item.strip()]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Article automation bot CLI.

    Generates blog articles with cover images and commits them to a
    GitHub repository.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=log_level, force=True)
    logger.debug("Debug mode enabled")


@cli.command()
@click.option("--prompt", "-p", required=True, help="Topic or writing brief")
@click.option("--tone", default="informative", show_default=True, help="Writing tone")
@click.option("--tags", default="", help="Comma-separated tags")
@click.option(
    "--affiliate-link", "affiliate_links", multiple=True, help="Link to append (repeatable)"
)
@click.option("--model", default=None, help="Model name (gpt-4 or gpt-3.5-turbo)")
@click.option("--count", "-n", default=1, show_default=True, type=int, help="Articles")
@click.option("--repo", default=None, help="Target repository, owner/name")
@click.option("--branch", default=None, help="Target branch")
@click.option("--dry-run", is_flag=True, help="Write files locally instead of committing")
@click.option(
    "--output-dir",
    default="out",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory for --dry-run output",
)
@click.pass_context
def generate(
    ctx: click.Context,
    prompt: str,
    tone: str,
    tags: str,
    affiliate_links,
    model: str,
    count: int,
    repo: str,
    branch: str,
    dry_run: bool,
    output_dir: str,
) -> None:
    """Generate articles and publish them."""

    async def _generate() -> bool:
        from pydantic import ValidationError

        from articlebot.core.exceptions import InvalidInput
        from articlebot.core.generator import ArticleGenerator
        from articlebot.models.content import ArticleRequest
        from articlebot.models.settings import Settings

        try:
            settings = Settings(debug=ctx.obj.get("debug", False))
            request = ArticleRequest(
                prompt=prompt,
                tone=tone,
                tags=_split_csv(tags),
                affiliate_links=list(affiliate_links),
                model=model,
                num_articles=count,
                repo=repo,
                branch=branch,
            )
            if dry_run:
                logger.info(f"🧪 Dry-run mode - writing files to {output_dir}")

            generator = ArticleGenerator.from_request(
                settings, request, dry_run=dry_run, output_dir=output_dir
            )
            report = await generator.generate(request)

        except (InvalidInput, ValidationError) as e:
            logger.error(f"❌ Invalid request: {e}")
            if ctx.obj.get("debug"):
                raise
            return False

        for result in report.rounds:
            if result.success:
                click.echo(f"✅ {result.index}: {result.title} -> {result.article_path}")
            else:
                click.echo(f"❌ {result.index}: {result.error}")
        click.echo(report.message)
        return report.success

    if not asyncio.run(_generate()):
        sys.exit(1)


@cli.command()
@click.argument("draft_file", type=click.File("r", encoding="utf-8"))
@click.option("--tags", default="", help="Comma-separated canonical tags")
@click.option("--date", "date_", default=None, help="Canonical date, YYYY-MM-DD")
@click.option("--prompt", default="", help="Original prompt, used for emoji matching")
@click.option("--policy", default=None, help="Fallback policy version")
def reconcile(draft_file, tags: str, date_: str, prompt: str, policy: str) -> None:
    """Normalize a draft's header and body and print the result."""
    from articlebot.core.exceptions import InvalidInput
    from articlebot.core.policy import CURRENT_POLICY_VERSION, get_policy
    from articlebot.core.reconciler import MetadataReconciler

    try:
        reconciler = MetadataReconciler(get_policy(policy or CURRENT_POLICY_VERSION))
        article = reconciler.reconcile(
            draft_file.read(),
            date_ or date.today().isoformat(),
            _split_csv(tags),
            prompt,
        )
    except (InvalidInput, KeyError) as e:
        raise click.BadParameter(str(e)) from e

    click.echo(article.text)


@cli.command()
def config() -> None:
    """Display current configuration (without sensitive values)."""
    from articlebot.models.settings import Settings

    settings = Settings()

    click.echo("\n📋 Article Bot Configuration\n")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Log Level: {settings.log_level}")
    click.echo(f"Fallback Policy: {settings.fallback_policy_version}")

    click.echo("\n🔑 API Keys:")
    keys_status = {
        "OpenAI": "✅ Configured" if settings.openai_api_key else "❌ Missing",
        "GitHub": "✅ Configured" if settings.github_token else "❌ Missing",
    }
    for service, status in keys_status.items():
        click.echo(f"  {service}: {status}")

    click.echo("\n📦 Publishing:")
    click.echo(f"  Repository: {settings.github_repo or 'not set'}")
    click.echo(f"  Branch: {settings.github_branch}")
    click.echo(f"  Articles: {settings.content_dir}/")
    click.echo(f"  Covers: {settings.covers_dir}/ (served at {settings.cover_url_prefix}/)")


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
def serve(host: str, port: int) -> None:
    """Run the web interface."""
    import uvicorn

    from articlebot.models.settings import Settings
    from articlebot.web.app import create_app

    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    cli()
