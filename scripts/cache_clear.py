from datetime import timedelta

import click
import uvloop
from sentry_sdk import set_tag, start_transaction

from avatar_privacy.handlers import CACHE_MAINTENANCE, TRANSIENTS
from avatar_privacy.lib.sentry import (
    SENTRY_CACHE_CLEAR_MONITOR,
    SENTRY_CACHE_CLEAR_MONITOR_SLUG,
)


async def _clear(max_age_days: int | None, validation: bool) -> None:
    if max_age_days is None:
        removed = await CACHE_MAINTENANCE.clear_icon_cache()
    else:
        removed = await CACHE_MAINTENANCE.clear_icon_cache_by_age(
            timedelta(days=max_age_days)
        )
    click.echo(f'Removed {click.style(removed, fg="bright_cyan")} cached icons')

    if validation:
        removed = await CACHE_MAINTENANCE.clear_validation_cache(TRANSIENTS)
        click.echo(f'Removed {click.style(removed, fg="bright_cyan")} validation results')


async def _run(max_age_days: int | None, validation: bool) -> None:
    with (
        SENTRY_CACHE_CLEAR_MONITOR,
        start_transaction(op='task', name=SENTRY_CACHE_CLEAR_MONITOR_SLUG),
    ):
        set_tag('cache_clear.max_age_days', max_age_days)
        set_tag('cache_clear.validation', validation)
        await _clear(max_age_days, validation)


@click.command()
@click.option('max_age_days', '--max-age', type=click.IntRange(min=0), help='Only remove icons older than this many days.')
@click.option('validation', '--validation', is_flag=True, help='Also remove cached Gravatar validation results.')
def main(max_age_days: int | None, validation: bool) -> None:
    uvloop.run(_run(max_age_days, validation))


if __name__ == '__main__':
    main()
