from pprint import pformat

import click

from avatar_privacy.default_icons.generators.monster_id import PARTS_DIR, MonsterId


@click.command()
def main() -> None:
    """Print the region optimization data of the monster parts."""
    dimensions = MonsterId().get_parts_dimensions()
    num_parts_str = click.style(f'{len(dimensions)} parts', fg='green')
    click.echo(f'Measured {num_parts_str} in {PARTS_DIR}', err=True)
    click.echo(f'PARTS_OPTIMIZATION = {pformat(dimensions, sort_dicts=False)}')


if __name__ == '__main__':
    main()
